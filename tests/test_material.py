"""Unit tests for materials and the material registry."""

import pytest
import taichi as ti


class TestMaterial:
    """Tests for the Material dataclass."""

    def test_defaults(self):
        from mirrortrace.materials import Appearance, Material

        material = Material()
        assert material.color == (1.0, 1.0, 1.0, 1.0)
        assert material.reflective == 0.0
        assert material.refractive == 0.0
        assert material.appearance == Appearance.SOLID_COLOR

    def test_solid_adds_alpha(self):
        from mirrortrace.materials import Material

        material = Material.solid((0.6, 0.3, 0.0), reflective=0.5)
        assert material.color == (0.6, 0.3, 0.0, 1.0)
        assert material.reflective == 0.5

    def test_equal_materials_hash_equal(self):
        from mirrortrace.materials import Material

        a = Material.solid((0.6, 0.3, 0.0), reflective=0.5)
        b = Material(color=(0.6, 0.3, 0.0), reflective=0.5)
        assert a == b
        assert hash(a) == hash(b)

    @pytest.mark.parametrize("reflective", [-0.1, 1.5])
    def test_reflective_out_of_range(self, reflective):
        from mirrortrace.materials import Material

        with pytest.raises(ValueError, match="reflective"):
            Material.solid((1.0, 1.0, 1.0), reflective=reflective)

    def test_non_finite_color(self):
        from mirrortrace.materials import Material

        with pytest.raises(ValueError, match="finite"):
            Material.solid((float("nan"), 0.0, 0.0))

    def test_color_at_solid(self):
        from mirrortrace.materials import Material

        material = Material.solid((0.1, 0.2, 0.3))
        assert material.color_at((5.0, 6.0, 7.0)) == (0.1, 0.2, 0.3, 1.0)

    def test_color_at_image_mapped_not_implemented(self):
        from mirrortrace.materials import Appearance, Material

        material = Material(appearance=Appearance.IMAGE_MAPPED)
        with pytest.raises(NotImplementedError):
            material.color_at((0.0, 0.0, 0.0))


class TestMaterialRegistry:
    """Tests for material field storage."""

    def test_add_material_returns_sequential_ids(self):
        from mirrortrace.materials import Material, add_material, get_material_count

        assert add_material(Material.solid((1.0, 0.0, 0.0))) == 0
        assert add_material(Material.solid((0.0, 1.0, 0.0))) == 1
        assert get_material_count() == 2

    def test_clear_materials(self):
        from mirrortrace.materials import Material, add_material, clear_materials, get_material_count

        add_material(Material())
        clear_materials()
        assert get_material_count() == 0

    def test_image_mapped_rejected(self):
        from mirrortrace.materials import Appearance, Material, add_material, get_material_count

        with pytest.raises(NotImplementedError):
            add_material(Material(appearance=Appearance.IMAGE_MAPPED))
        assert get_material_count() == 0

    def test_capacity(self):
        from mirrortrace.materials import Material, add_material, solid

        solid.num_materials[None] = solid.MAX_MATERIALS
        with pytest.raises(RuntimeError, match="Maximum number of materials"):
            add_material(Material())

    def test_lookup_in_kernel(self):
        from mirrortrace.core.ray import vec3
        from mirrortrace.materials import (
            Material,
            add_material,
            get_material_color,
            get_material_reflectivity,
        )

        idx = add_material(Material.solid((0.3, 0.3, 0.9), reflective=0.3))

        color = ti.Vector.field(4, dtype=ti.f32, shape=())
        reflectivity = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(i: ti.i32):
            color[None] = get_material_color(i, vec3(0.0, 0.0, 0.0))
            reflectivity[None] = get_material_reflectivity(i)

        test_kernel(idx)
        assert list(color[None]) == pytest.approx([0.3, 0.3, 0.9, 1.0])
        assert reflectivity[None] == pytest.approx(0.3)
