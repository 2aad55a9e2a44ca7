"""
Mesh export: OBJ/MTL serialization and flat material colours.
"""

from .colors import block_color, is_translucent
from .obj import ObjSerializer, material_name

__all__ = ["ObjSerializer", "block_color", "is_translucent", "material_name"]
