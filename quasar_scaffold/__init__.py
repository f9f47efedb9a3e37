"""quasar-scaffold -- scaffolds Quasar apps and toggles Browser Extension support."""

__version__ = "1.7.0"
