"""
test_geometry.py - Tests for points, transforms and vector helpers.
"""

import math
import numpy as np
import pytest

from geometry import (
    RotationMatrix,
    Transform,
    Vector,
    identity_matrix,
    is_point_in_triangle,
    matrix_to_align_vector_a_to_b,
    normal_of_three_points,
    rot_x_matrix,
    rot_y_matrix,
    rot_z_matrix,
    signed_angle_xy,
    t_rot_z_matrix,
    transform_points,
)

# ============================================================================
# Test Utilities
# ============================================================================

def run_test(name: str, condition: bool, msg_pass: str = "PASS", msg_fail: str = "FAIL"):
    """Run a single test and print result."""
    status = msg_pass if condition else msg_fail
    symbol = "✓" if condition else "✗"
    print(f"  [{symbol}] {name}: {status}")
    return condition

def close(a: Vector, b, tol: float = 1e-9) -> bool:
    return np.allclose(a.to_array(), np.asarray(b, dtype=float), atol=tol)

# ============================================================================
# Vector Tests
# ============================================================================

def test_vector_clones():
    print("\n=== Vector Clone Tests ===")
    p = Vector(1.0, 2.0, 3.0, "p", "0-1")

    shifted = p.clone_shift(1.0, -2.0, 0.5)
    assert run_test("Shift moves point", close(shifted, [2.0, 0.0, 3.5]))
    assert run_test("Shift keeps name/id", (shifted.name, shifted.point_id) == ("p", "0-1"))
    assert run_test("Original untouched", close(p, [1.0, 2.0, 3.0]))

    moved = p.clone_trot_shift(rot_z_matrix(math.pi / 2), 0.0, 0.0, 10.0)
    assert run_test("Rotate then shift", close(moved, [-2.0, 1.0, 13.0]),
                    f"{moved.to_array()}")

    renamed = p.new_trot(identity_matrix(), "q", "9")
    assert run_test("new_trot renames", (renamed.name, renamed.point_id) == ("q", "9"))

    marker = p.to_marker()
    assert run_test("Marker fields", marker == {"x": 1.0, "y": 2.0, "z": 3.0,
                                                "name": "p", "id": "0-1"})

# ============================================================================
# Transform Tests
# ============================================================================

def test_rotation_builders():
    print("\n=== Rotation Builder Tests ===")
    x = Vector(1.0, 0.0, 0.0)

    assert run_test("Rz(90) x -> y", close(x.clone_trot(rot_z_matrix(math.pi / 2)), [0, 1, 0]))
    assert run_test("Rx(90) y -> z",
                    close(Vector(0, 1, 0).clone_trot(rot_x_matrix(math.pi / 2)), [0, 0, 1]))
    assert run_test("Ry(90) z -> x",
                    close(Vector(0, 0, 1).clone_trot(rot_y_matrix(math.pi / 2)), [1, 0, 0]))

    t = t_rot_z_matrix(math.pi, 5.0, 0.0, 0.0)
    assert run_test("t_rot_z is a general Transform", not isinstance(t, RotationMatrix))
    assert run_test("t_rot_z rotates then translates", close(x.clone_trot(t), [4, 0, 0]))

    both = rot_z_matrix(0.3) @ rot_z_matrix(0.2)
    assert run_test("Rotation @ rotation stays RotationMatrix", isinstance(both, RotationMatrix))
    assert run_test("Angles add", np.allclose(both.matrix, rot_z_matrix(0.5).matrix))
    assert run_test("Rotation @ transform is Transform",
                    type(rot_z_matrix(0.3) @ t) is Transform)


def test_rotation_matrix_rejects_non_rotations():
    print("\n=== RotationMatrix Validation Tests ===")
    with pytest.raises(ValueError):
        RotationMatrix(t_rot_z_matrix(0.0, 1.0, 0.0, 0.0).matrix)
    with pytest.raises(ValueError):
        RotationMatrix(np.diag([2.0, 1.0, 1.0, 1.0]))
    with pytest.raises(ValueError):
        RotationMatrix(np.diag([-1.0, 1.0, 1.0, 1.0]))
    with pytest.raises(ValueError):
        Transform(np.eye(3))
    run_test("Scale, shear, reflection and translation rejected", True)


def test_transform_is_read_only():
    m = rot_z_matrix(0.1)
    with pytest.raises(ValueError):
        m.matrix[0, 0] = 5.0
    run_test("Transform matrix is read only", True)


def test_align_vectors():
    print("\n=== Align Vector Tests ===")
    z = Vector(0.0, 0.0, 1.0)

    tilted = Vector(0.0, math.sin(0.4), math.cos(0.4))
    r = matrix_to_align_vector_a_to_b(tilted, z)
    assert run_test("Tilted normal lands on +Z", close(tilted.clone_trot(r), [0, 0, 1]))

    skewed = Vector(0.3, -0.2, 0.9)
    r = matrix_to_align_vector_a_to_b(skewed, z)
    unit = skewed.to_array() / np.linalg.norm(skewed.to_array())
    assert run_test("Skewed normal lands on +Z", np.allclose(r.apply(unit), [0, 0, 1]))

    assert run_test("Parallel gives identity",
                    np.allclose(matrix_to_align_vector_a_to_b(z, z).matrix, np.eye(4)))

    flipped = matrix_to_align_vector_a_to_b(Vector(0, 0, -1), z)
    assert run_test("Anti-parallel gives half turn",
                    close(Vector(0, 0, -1).clone_trot(flipped), [0, 0, 1]))

# ============================================================================
# Helper Tests
# ============================================================================

def test_triangle_and_normals():
    print("\n=== Triangle / Normal Tests ===")
    a, b, c = Vector(0, 0, 0), Vector(10, 0, 0), Vector(0, 10, 0)

    assert run_test("Inside", is_point_in_triangle(Vector(2, 2, 0), a, b, c))
    assert run_test("Outside", not is_point_in_triangle(Vector(8, 8, 0), a, b, c))
    assert run_test("On edge counts as inside", is_point_in_triangle(Vector(5, 0, 0), a, b, c))

    n = normal_of_three_points(a, b, c)
    assert run_test("Counter-clockwise normal is +Z", close(n, [0, 0, 1]))
    assert run_test("Collinear has no normal",
                    normal_of_three_points(a, b, Vector(20, 0, 0)) is None)


def test_signed_angle():
    print("\n=== Signed Angle Tests ===")
    x, y = Vector(1, 0, 0), Vector(0, 1, 0)
    assert run_test("x -> y is +90", math.isclose(signed_angle_xy(x, y), math.pi / 2))
    assert run_test("y -> x is -90", math.isclose(signed_angle_xy(y, x), -math.pi / 2))
    assert run_test("z ignored", math.isclose(signed_angle_xy(Vector(1, 0, 5), y), math.pi / 2))
    assert run_test("Degenerate is 0", signed_angle_xy(Vector(0, 0, 1), y) == 0.0)


def test_transform_points_keeps_identity():
    pts = [Vector(1, 0, 0, "a", "1"), Vector(0, 1, 0, "b", "2")]
    moved = transform_points(pts, rot_z_matrix(math.pi))
    assert run_test("Batch transform", close(moved[0], [-1, 0, 0]) and close(moved[1], [0, -1, 0]))
    assert run_test("Names kept", [p.name for p in moved] == ["a", "b"])
    assert run_test("Empty input", transform_points([], rot_z_matrix(1.0)) == [])


if __name__ == "__main__":
    test_vector_clones()
    test_rotation_builders()
    test_rotation_matrix_rejects_non_rotations()
    test_transform_is_read_only()
    test_align_vectors()
    test_triangle_and_normals()
    test_signed_angle()
    test_transform_points_keeps_identity()
