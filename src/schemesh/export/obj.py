"""
Wavefront OBJ/MTL serialization for quad lists.
"""

import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from schemesh.config import load_section
from schemesh.export.colors import block_color, is_translucent
from schemesh.meshing.quad import Quad

logger = logging.getLogger(__name__)

_UNSAFE = re.compile(r"[:\[\]=,\s]")


def material_name(material: str, strip_prefix: bool = True) -> str:
    """OBJ-safe material name."""
    if strip_prefix and material.startswith("minecraft:"):
        material = material[len("minecraft:") :]
    return _UNSAFE.sub("_", material)


def _fmt(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(round(float(value), 6))


class ObjSerializer:
    """
    Writes quads as an OBJ mesh plus MTL material library.

    Faces are grouped per material in order of first appearance; identical
    vertex positions, UVs and normals are shared between faces.
    """

    def __init__(self, config_path: Optional[Path] = None):
        config = load_section("export", config_path)
        self.strip_prefix = bool(config.get("material_prefix_strip", True))
        self.include_colors = bool(config.get("include_colors", True))

    def serialize(self, quads: List[Quad], mtl_filename: str = "model.mtl") -> Tuple[str, str]:
        """
        Render quads to OBJ and MTL text.

        Args:
            quads: Quads in emission order
            mtl_filename: Name referenced by the OBJ "mtllib" line

        Returns:
            (obj_text, mtl_text)
        """
        vertices: Dict[Tuple[float, float, float], int] = {}
        uvs: Dict[Tuple[float, float], int] = {}
        normals: Dict[Tuple[float, float, float], int] = {}
        groups: Dict[str, List[str]] = {}

        for quad in quads:
            refs = []
            normal = normals.setdefault(quad.normal(), len(normals) + 1)
            for vertex, uv in zip(quad.vertices, quad.uvs):
                v = vertices.setdefault(vertex, len(vertices) + 1)
                vt = uvs.setdefault(uv, len(uvs) + 1)
                refs.append(f"{v}/{vt}/{normal}")
            name = material_name(quad.material, self.strip_prefix)
            groups.setdefault(name, []).append("f " + " ".join(refs))

        lines = [
            "# schemesh OBJ export",
            f"# {len(quads)} quads, {len(groups)} materials",
            f"mtllib {mtl_filename}",
            "",
        ]
        lines.extend(f"v {_fmt(x)} {_fmt(y)} {_fmt(z)}" for x, y, z in vertices)
        lines.extend(f"vt {_fmt(u)} {_fmt(v)}" for u, v in uvs)
        lines.extend(f"vn {_fmt(x)} {_fmt(y)} {_fmt(z)}" for x, y, z in normals)

        for name, faces in groups.items():
            lines.append("")
            lines.append(f"usemtl {name}")
            lines.extend(faces)

        obj_text = "\n".join(lines) + "\n"
        mtl_text = self.materials(list(groups))
        return obj_text, mtl_text

    def materials(self, names: List[str]) -> str:
        """MTL text with one flat-coloured material per name."""
        lines = ["# schemesh materials", ""]
        for name in names:
            r, g, b = block_color(name) if self.include_colors else (0.8, 0.8, 0.8)
            lines.extend(
                [
                    f"newmtl {name}",
                    f"Kd {r} {g} {b}",
                    "Ka 0.2 0.2 0.2",
                    "Ks 0.0 0.0 0.0",
                    "Ns 10.0",
                    f"d {0.6 if is_translucent(name) else 1.0}",
                    "illum 2",
                    "",
                ]
            )
        return "\n".join(lines)

    def write(self, quads: List[Quad], path: Union[str, Path]) -> Tuple[Path, Path]:
        """
        Write `path` (OBJ) and a sibling .mtl file.

        Returns:
            (obj_path, mtl_path)
        """
        obj_path = Path(path)
        mtl_path = obj_path.with_suffix(".mtl")
        obj_text, mtl_text = self.serialize(quads, mtl_filename=mtl_path.name)

        obj_path.parent.mkdir(parents=True, exist_ok=True)
        with open(obj_path, "w") as f:
            f.write(obj_text)
        with open(mtl_path, "w") as f:
            f.write(mtl_text)

        logger.info(f"Wrote {len(quads)} quads to {obj_path}")
        return obj_path, mtl_path
