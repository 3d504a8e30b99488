"""
MS_Libs - Mockup Studio Library Modules

This package contains the layered composition and edit-history engine
for Mockup Studio, organized into specialized sub-packages:

- ImageEditingLib: Image buffers, geometry, filters, mask, crop and bake
- LayersLib: Text and overlay layers plus drag/resize interactions
- SessionLib: Edit history, variation store and the editing session
- ProjStoreLib: Project persistence, asset loading and synthesis requests
"""

__version__ = "0.1.0"
