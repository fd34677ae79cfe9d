"""Asset assembler — render groups → glTF scene over one shared binary buffer.

Every accessor and every embedded image gets its own 4-byte aligned buffer
view. One primitive and one material per group, all on a single mesh under a
single node in the default scene.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
import pygltflib
from numpy.typing import NDArray

from arforge.engine.config import MaterialPreset
from arforge.engine.context import RenderGroup, TextureImage
from arforge.errors import EmptyGeometry

logger = logging.getLogger(__name__)

# Sampler filter / wrap enums (glTF 2.0)
_LINEAR = 9729
_LINEAR_MIPMAP_LINEAR = 9987
_REPEAT = 10497

_MAX_USHORT_INDEX = 65535


@dataclass
class SceneAsset:
    """A glTF document plus the bytes of its single buffer."""

    gltf: pygltflib.GLTF2
    buffer: bytes

    @property
    def primitive_count(self) -> int:
        return sum(len(m.primitives) for m in self.gltf.meshes)


class SceneBuilder:
    """Append-only arena for one asset; records are referenced by list index."""

    def __init__(self, name: str = "asset") -> None:
        self.name = name
        self.gltf = pygltflib.GLTF2(
            scene=0,
            scenes=[pygltflib.Scene(nodes=[])],
            nodes=[],
            meshes=[],
            materials=[],
            accessors=[],
            bufferViews=[],
            buffers=[],
            images=[],
            samplers=[],
            textures=[],
        )
        self.blob = bytearray()
        self._primitives: list[pygltflib.Primitive] = []

    # -- buffer ------------------------------------------------------------

    def add_view(self, data: bytes, target: int | None = None) -> int:
        """Append bytes at the next 4-byte boundary and register a buffer view."""
        pad = (-len(self.blob)) % 4
        self.blob.extend(b"\x00" * pad)
        offset = len(self.blob)
        self.blob.extend(data)
        self.gltf.bufferViews.append(
            pygltflib.BufferView(
                buffer=0,
                byteOffset=offset,
                byteLength=len(data),
                target=target,
            )
        )
        return len(self.gltf.bufferViews) - 1

    def add_accessor(
        self,
        array: NDArray,
        accessor_type: str,
        component_type: int,
        target: int,
        with_bounds: bool = False,
    ) -> int:
        view = self.add_view(array.tobytes(), target)
        accessor = pygltflib.Accessor(
            bufferView=view,
            byteOffset=0,
            componentType=component_type,
            count=len(array),
            type=accessor_type,
        )
        if with_bounds and len(array):
            accessor.min = [float(v) for v in array.min(axis=0)]
            accessor.max = [float(v) for v in array.max(axis=0)]
        self.gltf.accessors.append(accessor)
        return len(self.gltf.accessors) - 1

    # -- materials ---------------------------------------------------------

    def add_texture(self, image: TextureImage) -> int:
        view = self.add_view(image.data)
        self.gltf.images.append(pygltflib.Image(bufferView=view, mimeType=image.mime_type))
        if not self.gltf.samplers:
            self.gltf.samplers.append(
                pygltflib.Sampler(
                    magFilter=_LINEAR,
                    minFilter=_LINEAR_MIPMAP_LINEAR,
                    wrapS=_REPEAT,
                    wrapT=_REPEAT,
                )
            )
        self.gltf.textures.append(
            pygltflib.Texture(sampler=0, source=len(self.gltf.images) - 1)
        )
        return len(self.gltf.textures) - 1

    def add_material(self, group: RenderGroup, preset: MaterialPreset) -> int:
        pbr = pygltflib.PbrMetallicRoughness(
            baseColorFactor=[float(c) for c in group.color] + [1.0],
            metallicFactor=float(preset.metallic),
            roughnessFactor=float(preset.roughness),
        )
        if group.texture is not None:
            pbr.baseColorTexture = pygltflib.TextureInfo(index=self.add_texture(group.texture))
        self.gltf.materials.append(
            pygltflib.Material(
                name=f"color_{group.key}",
                pbrMetallicRoughness=pbr,
                doubleSided=preset.double_sided,
            )
        )
        return len(self.gltf.materials) - 1

    # -- geometry ----------------------------------------------------------

    def add_group(self, group: RenderGroup, preset: MaterialPreset) -> None:
        positions = np.ascontiguousarray(group.positions, dtype=np.float32)
        normals = np.ascontiguousarray(group.normals, dtype=np.float32)

        attributes = pygltflib.Attributes(
            POSITION=self.add_accessor(
                positions, pygltflib.VEC3, pygltflib.FLOAT, pygltflib.ARRAY_BUFFER, with_bounds=True
            ),
            NORMAL=self.add_accessor(
                normals, pygltflib.VEC3, pygltflib.FLOAT, pygltflib.ARRAY_BUFFER
            ),
        )
        if group.uvs is not None:
            uvs = np.ascontiguousarray(group.uvs, dtype=np.float32)
            attributes.TEXCOORD_0 = self.add_accessor(
                uvs, pygltflib.VEC2, pygltflib.FLOAT, pygltflib.ARRAY_BUFFER
            )

        indices = None
        if group.indices is not None:
            if len(group.indices) and int(group.indices.max()) < _MAX_USHORT_INDEX:
                data, component = group.indices.astype(np.uint16), pygltflib.UNSIGNED_SHORT
            else:
                data, component = group.indices.astype(np.uint32), pygltflib.UNSIGNED_INT
            indices = self.add_accessor(
                np.ascontiguousarray(data),
                pygltflib.SCALAR,
                component,
                pygltflib.ELEMENT_ARRAY_BUFFER,
            )

        self._primitives.append(
            pygltflib.Primitive(
                attributes=attributes,
                indices=indices,
                material=self.add_material(group, preset),
                mode=pygltflib.TRIANGLES,
            )
        )

    def build(self) -> SceneAsset:
        self.gltf.meshes.append(pygltflib.Mesh(name=self.name, primitives=self._primitives))
        self.gltf.nodes.append(pygltflib.Node(name=self.name, mesh=0))
        self.gltf.scenes[0].nodes.append(0)

        pad = (-len(self.blob)) % 4
        self.blob.extend(b"\x00" * pad)
        self.gltf.buffers = [pygltflib.Buffer(byteLength=len(self.blob))]
        self.gltf.set_binary_blob(bytes(self.blob))
        return SceneAsset(gltf=self.gltf, buffer=bytes(self.blob))


def assemble(groups: list[RenderGroup], preset: MaterialPreset, name: str = "asset") -> SceneAsset:
    """Build the scene for one request."""
    if not groups:
        raise EmptyGeometry("No render groups to assemble")

    builder = SceneBuilder(name)
    for group in groups:
        builder.add_group(group, preset)
    asset = builder.build()

    logger.info(
        "Assembled %d primitives, %d accessors, %d buffer views, %d bytes",
        asset.primitive_count,
        len(asset.gltf.accessors),
        len(asset.gltf.bufferViews),
        len(asset.buffer),
    )
    return asset
