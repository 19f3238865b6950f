#!/usr/bin/env python3
"""
シーン文書パーサーのテスト
"""

import os
import sys
import unittest

import pygltflib

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, os.path.dirname(__file__))

from annoscene.data_types import SceneStructureError
from annoscene.geometry import Vector, Quaternion
from annoscene.scene import SceneDocument, SceneNode
from scene_builder import GltfBuilder, UNIT_SQUARE


class TestSceneDocumentStructure(unittest.TestCase):
    """文書構造の検証テスト"""

    def test_missing_nodes_is_fatal(self):
        with self.assertRaises(SceneStructureError):
            SceneDocument.from_dict({"meshes": []})

    def test_non_list_nodes_is_fatal(self):
        with self.assertRaises(SceneStructureError):
            SceneDocument.from_dict({"nodes": {"name": "prop_a"}})

    def test_non_mapping_document_is_fatal(self):
        with self.assertRaises(SceneStructureError):
            SceneDocument.from_dict([{"name": "prop_a"}])

    def test_structure_error_is_value_error(self):
        self.assertTrue(issubclass(SceneStructureError, ValueError))

    def test_empty_nodes(self):
        document = SceneDocument.from_dict({"nodes": []})
        self.assertEqual(document.nodes, ())
        self.assertEqual(document.summary(), {
            "nodes": 0, "meshes": 0, "accessors": 0, "bufferViews": 0, "buffers": 0
        })

    def test_non_list_optional_arrays_ignored(self):
        document = SceneDocument.from_dict({"nodes": [], "meshes": "broken"})
        self.assertEqual(document.meshes, [])

    def test_typed_document_is_gltf2(self):
        document = SceneDocument.from_dict({"nodes": [{"name": "prop_a", "mesh": 0}], "meshes": [{
            "name": "m", "primitives": [{"attributes": {"POSITION": 2, "NORMAL": 3}}]
        }]})
        self.assertIsInstance(document.gltf, pygltflib.GLTF2)
        self.assertIsInstance(document.gltf.nodes[0], pygltflib.Node)
        self.assertIsInstance(document.meshes[0].primitives[0].attributes, pygltflib.Attributes)
        self.assertEqual(document.position_accessor(document.meshes[0]), 2)

    def test_invalid_position_attribute(self):
        document = SceneDocument.from_dict({"nodes": [], "meshes": [{
            "primitives": [{"attributes": {"POSITION": "0"}}]
        }]})
        self.assertIsNone(document.position_accessor(document.meshes[0]))


class TestSceneNodeParsing(unittest.TestCase):
    """ノード変換の既定値・不正値テスト"""

    def test_identity_defaults(self):
        document = SceneDocument.from_dict({"nodes": [{"name": "prop_a"}]})
        node = document.nodes[0]
        self.assertEqual(node, SceneNode(index=0, name="prop_a"))
        self.assertEqual(node.translation, Vector(0.0, 0.0, 0.0))
        self.assertEqual(node.rotation, Quaternion(0.0, 0.0, 0.0, 1.0))
        self.assertEqual(node.scale, Vector(1.0, 1.0, 1.0))
        self.assertIsNone(node.mesh)

    def test_explicit_transform(self):
        document = SceneDocument.from_dict({"nodes": [{
            "name": "fc_a",
            "translation": [1, 2, 3],
            "rotation": [0, 1, 0, 0],
            "scale": [2, 2, 2],
        }]})
        node = document.nodes[0]
        self.assertEqual(node.translation, Vector(1.0, 2.0, 3.0))
        self.assertEqual(node.rotation, Quaternion(0.0, 1.0, 0.0, 0.0))
        self.assertEqual(node.scale, Vector(2.0, 2.0, 2.0))

    def test_malformed_transform_falls_back(self):
        """不正な変換は部分値でなく既定値"""
        document = SceneDocument.from_dict({"nodes": [{
            "name": "prop_a",
            "translation": [1.0, "abc", 3.0],
            "rotation": [0.0, 1.0],
            "scale": "big",
        }]})
        node = document.nodes[0]
        self.assertEqual(node.translation, Vector.zero())
        self.assertEqual(node.rotation, Quaternion.identity())
        self.assertEqual(node.scale, Vector.one())

    def test_numeric_strings_accepted(self):
        document = SceneDocument.from_dict({"nodes": [{"name": "a", "translation": ["1.5", "0", "-2"]}]})
        self.assertEqual(document.nodes[0].translation, Vector(1.5, 0.0, -2.0))

    def test_missing_name_is_empty(self):
        document = SceneDocument.from_dict({"nodes": [{}, "garbage"]})
        self.assertEqual(document.nodes[0].name, "")
        self.assertEqual(document.nodes[1].name, "")

    def test_invalid_mesh_index(self):
        document = SceneDocument.from_dict({"nodes": [{"name": "a", "mesh": -1}, {"name": "b", "mesh": "0"}]})
        self.assertIsNone(document.nodes[0].mesh)
        self.assertIsNone(document.nodes[1].mesh)


class TestMeshLookup(unittest.TestCase):
    """メッシュ参照テスト"""

    def setUp(self):
        builder = GltfBuilder()
        mesh = builder.add_mesh("oak.prp.002", UNIT_SQUARE, stride=16)
        builder.add_node("prop_tree", mesh)
        builder.add_node("prop_dangling", 5)
        builder.add_node("prop_empty")
        self.document = SceneDocument.from_dict(builder.build())

    def test_mesh_for(self):
        mesh = self.document.mesh_for(self.document.nodes[0])
        self.assertEqual(mesh.name, "oak.prp.002")
        self.assertEqual(self.document.position_accessor(mesh), 0)
        self.assertEqual(self.document.mesh_name(self.document.nodes[0]), "oak.prp.002")

    def test_out_of_range_mesh(self):
        self.assertIsNone(self.document.mesh_for(self.document.nodes[1]))
        self.assertIsNone(self.document.mesh_name(self.document.nodes[1]))

    def test_node_without_mesh(self):
        self.assertIsNone(self.document.mesh_for(self.document.nodes[2]))

    def test_buffer_view_fields(self):
        view = self.document.buffer_views[0]
        self.assertEqual(view.buffer, 0)
        self.assertEqual(view.byteStride, 16)
        self.assertEqual(view.byteLength, 64)

    def test_zero_stride_means_packed(self):
        document = SceneDocument.from_dict({
            "nodes": [],
            "bufferViews": [{"buffer": 0, "byteLength": 12, "byteStride": 0}],
        })
        self.assertIsNone(document.buffer_views[0].byteStride)

    def test_mesh_without_primitives(self):
        document = SceneDocument.from_dict({"nodes": [], "meshes": [{"name": "m"}]})
        self.assertIsNone(document.position_accessor(document.meshes[0]))


if __name__ == '__main__':
    unittest.main()
