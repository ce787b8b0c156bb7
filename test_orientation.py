"""
test_orientation.py - Tests for the ground support solver.

Tests validate:
- Neutral pose rests on all six feet at tibia height
- A lifted leg drops out of the ground legs
- Poses without support below the body are reported Unstable
- Tilted supports keep every point on or above the plane
"""

import math

from geometry import dot
from hexagon import build_hexagon
from kinematics import BodyDimensions, LegAngles, LegDimensions, build_legs_list
from orientation import (
    OrientationProperties,
    Unstable,
    compute_orientation_properties,
    signed_height,
)
from pose_templates import DEFAULT_POSE, uniform_pose, with_leg

BODY_DIMS = BodyDimensions(front=100.0, side=100.0, middle=100.0)
LEG_DIMS = LegDimensions(coxia=50.0, femur=80.0, tibia=130.0)

# ============================================================================
# Test Utilities
# ============================================================================

def run_test(name: str, condition: bool, msg_pass: str = "PASS", msg_fail: str = "FAIL"):
    """Run a single test and print result."""
    status = msg_pass if condition else msg_fail
    symbol = "✓" if condition else "✗"
    print(f"  [{symbol}] {name}: {status}")
    return condition

def flat_legs(pose):
    body = build_hexagon(BODY_DIMS)
    return build_legs_list(body.vertices, pose, LEG_DIMS)

# ============================================================================
# Stable Supports
# ============================================================================

def test_neutral_pose():
    print("\n=== Neutral Pose ===")
    solved = compute_orientation_properties(flat_legs(DEFAULT_POSE))
    assert run_test("Solved", isinstance(solved, OrientationProperties))
    assert run_test("Height is tibia length", math.isclose(solved.height, 130.0),
                    f"{solved.height:.3f}")
    assert run_test("Normal is +Z", math.isclose(solved.n_axis.z, 1.0))
    assert run_test("All six legs on ground", len(solved.ground_legs) == 6)


def test_lifted_leg():
    print("\n=== One Leg Lifted ===")
    pose = with_leg(DEFAULT_POSE, "right_middle", LegAngles(beta=math.pi / 4))
    solved = compute_orientation_properties(flat_legs(pose))
    assert run_test("Solved", isinstance(solved, OrientationProperties))
    positions = [leg.position for leg in solved.ground_legs]
    assert run_test("Five ground legs", len(positions) == 5, f"{positions}")
    assert run_test("Lifted leg excluded", "right_middle" not in positions)
    assert run_test("Height unchanged", math.isclose(solved.height, 130.0))


def test_tilted_support():
    print("\n=== Tilted Support ===")
    pose = DEFAULT_POSE
    for position in ("left_front", "left_middle", "left_back"):
        pose = with_leg(pose, position, LegAngles(beta=0.3))
    legs = flat_legs(pose)
    solved = compute_orientation_properties(legs)

    assert run_test("Solved", isinstance(solved, OrientationProperties))
    assert run_test("3 to 6 ground legs", 3 <= len(solved.ground_legs) <= 6,
                    f"{len(solved.ground_legs)}")
    assert run_test("Body above plane", solved.height > 0.0)
    assert run_test("Plane tilted", solved.n_axis.z < 1.0 - 1e-6)
    assert run_test("Unit normal", math.isclose(dot(solved.n_axis, solved.n_axis), 1.0))
    lowest = min(signed_height(p, solved.n_axis, solved.height)
                 for leg in legs for p in leg.points)
    assert run_test("No point below plane", lowest >= -1.0, f"{lowest:.4f}")

# ============================================================================
# Unstable Poses
# ============================================================================

def test_legs_above_body():
    print("\n=== Legs Raised Above Body ===")
    solved = compute_orientation_properties(flat_legs(uniform_pose(beta=math.pi / 2)))
    assert run_test("Unstable", isinstance(solved, Unstable))
    assert run_test("Reason given", bool(solved.reason))


def test_folded_tibias_rest_body_on_ground():
    print("\n=== Tibias Folded Up ===")
    # Every femur end is level with the body: no support below the body
    solved = compute_orientation_properties(flat_legs(uniform_pose(gamma=math.pi)))
    assert run_test("Unstable", isinstance(solved, Unstable))


def test_tipped_onto_coxia():
    print("\n=== Support On One Side Only ===")
    # Only left_front and left_back reach down; the body tips onto the
    # furthest raised coxia end on the other side (right_middle)
    pose = DEFAULT_POSE
    for position in ("right_middle", "right_front", "right_back", "left_middle"):
        pose = with_leg(pose, position, LegAngles(beta=math.pi / 2))
    solved = compute_orientation_properties(flat_legs(pose))

    assert run_test("Solved", isinstance(solved, OrientationProperties))
    positions = [leg.position for leg in solved.ground_legs]
    assert run_test("Three ground legs", positions == ["right_middle", "left_front", "left_back"],
                    f"{positions}")
    contact = solved.ground_legs[0].maybe_ground_contact_point
    assert run_test("Right middle rests on coxia end", contact.name == "right_middle-coxia")

    slope = 130.0 / (150.0 + 100.0 + 130.0 / math.sqrt(2))
    expected_height = 150.0 * slope / math.sqrt(1.0 + slope * slope)
    assert run_test("Tipped height", math.isclose(solved.height, expected_height, rel_tol=1e-9),
                    f"{solved.height:.3f}", f"Expected {expected_height:.3f}, got {solved.height:.3f}")


if __name__ == "__main__":
    test_neutral_pose()
    test_lifted_leg()
    test_tilted_support()
    test_legs_above_body()
    test_folded_tibias_rest_body_on_ground()
    test_tipped_onto_coxia()
