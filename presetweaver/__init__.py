"""List Lost Ark customization presets and convert them between game regions."""

__version__ = "0.1.0"