"""
HoleMark - shot group analysis from target photos.

This package contains the main application modules:
- core: Application core, units, viewport transform and group statistics
- ui: Main window
- editor: Annotation model, interaction, rendering, export and widgets
- services: Application services (config, logging)
"""

__version__ = "0.1.0"
