import math

import numpy as np
import pytest

from camgeom.essential import EssentialMatrix, RelativePose


def _euler(roll, pitch, yaw):
    cr, sr = math.cos(roll), math.sin(roll)
    cp, sp = math.cos(pitch), math.sin(pitch)
    cy, sy = math.cos(yaw), math.sin(yaw)
    rx = np.array([[1.0, 0.0, 0.0], [0.0, cr, -sr], [0.0, sr, cr]])
    ry = np.array([[cp, 0.0, sp], [0.0, 1.0, 0.0], [-sp, 0.0, cp]])
    rz = np.array([[cy, -sy, 0.0], [sy, cy, 0.0], [0.0, 0.0, 1.0]])
    return rz @ ry @ rx


def _angle_between(rot_a, rot_b):
    relative = rot_a.T @ rot_b
    cosine = (float(relative.diagonal().sum()) - 1.0) / 2.0
    return math.acos(min(1.0, max(-1.0, cosine)))


def _unit(v):
    v = np.asarray(v, dtype=float)
    return v / np.linalg.norm(v)


POSE = RelativePose(_euler(0.2, 0.3, 0.4), np.array([-0.8, 0.4, 0.5]))

POSES = [
    POSE,
    RelativePose(_euler(-0.1, 0.05, 0.3), np.array([0.3, -0.2, 1.0])),
    RelativePose(_euler(0.5, -0.4, 0.1), np.array([1.0, 0.0, 0.0])),
]


def test_pose_inverse_round_trip():
    point = np.array([0.4, -0.25, 5.0])
    back = POSE.inverse().transform(POSE.transform(point))
    assert np.allclose(back, point)


def test_residual_is_zero_for_true_correspondence():
    essential = EssentialMatrix.from_pose(POSE)
    point_a = np.array([0.4, -0.25, 5.0])
    point_b = POSE.transform(point_a)
    assert essential.residual(_unit(point_a), _unit(point_b)) < 1e-9


def test_residual_is_large_for_wrong_correspondence():
    essential = EssentialMatrix.from_pose(POSE)
    assert essential.residual(_unit([0.4, -0.25, 5.0]), _unit([-0.7, 0.6, 2.0])) > 1e-3


def test_from_pose_encodes_cross_product():
    essential = EssentialMatrix.from_pose(POSE)
    v = np.array([0.3, -1.2, 2.0])
    assert np.allclose(essential.matrix @ v, np.cross(POSE.translation, POSE.rotation @ v))


def test_possible_rotations_unscaled_translation():
    essential = EssentialMatrix.from_pose(POSE)
    rot_a, rot_b, t = essential.possible_rotations_unscaled_translation(1e-6, 50)
    a_close = _angle_between(rot_a, POSE.rotation) < 1e-4
    b_close = _angle_between(rot_b, POSE.rotation) < 1e-4
    assert a_close or b_close
    t_res = 1.0 - abs(_unit(t) @ _unit(POSE.translation))
    assert t_res < 1e-4


def test_candidate_rotations_are_proper():
    essential = EssentialMatrix.from_pose(POSE)
    for rotation in essential.possible_rotations(1e-6, 50):
        assert np.allclose(rotation.T @ rotation, np.eye(3), atol=1e-9)
        assert np.linalg.det(rotation) == pytest.approx(1.0, abs=1e-9)


def test_possible_rotations_one_correct():
    rotations = EssentialMatrix.from_pose(POSE).possible_rotations(1e-6, 50)
    assert len(rotations) == 2
    assert any(_angle_between(rot, POSE.rotation) < 1e-4 for rot in rotations)


@pytest.mark.parametrize("pose", POSES)
def test_possible_unscaled_poses_one_correct(pose):
    candidates = EssentialMatrix.from_pose(pose).possible_unscaled_poses(1e-6, 50)
    assert len(candidates) == 4
    assert any(
        _angle_between(c.rotation, pose.rotation) < 1e-4
        and 1.0 - _unit(c.translation) @ _unit(pose.translation) < 1e-4
        for c in candidates
    )


def test_possible_unscaled_poses_bearing():
    candidates = EssentialMatrix.from_pose(POSE).possible_unscaled_poses_bearing(1e-6, 50)
    assert len(candidates) == 2
    assert np.allclose(candidates[0].translation, candidates[1].translation)
    assert any(_angle_between(c.rotation, POSE.rotation) < 1e-4 for c in candidates)


def test_recondition_keeps_valid_matrix():
    essential = EssentialMatrix.from_pose(POSE)
    fixed = essential.recondition(1e-9, 100)
    assert np.allclose(fixed.matrix, essential.matrix, atol=1e-9)


def test_recondition_enforces_singular_value_structure():
    noise = np.array([[0.01, -0.02, 0.005], [0.0, 0.015, -0.01], [0.02, 0.01, -0.005]])
    noisy = EssentialMatrix(EssentialMatrix.from_pose(POSE).matrix + noise)
    fixed = noisy.recondition(1e-9, 100)
    singular = np.linalg.svd(fixed.matrix, compute_uv=False)
    assert singular[0] == pytest.approx(singular[1], rel=1e-9)
    assert singular[2] < 1e-9


def test_svd_iteration_limit_raises():
    matrix = EssentialMatrix(np.array([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0], [7.0, 8.0, 10.0]]))
    with pytest.raises(np.linalg.LinAlgError):
        matrix.possible_rotations(1e-12, 1)


def test_negative_epsilon_rejected():
    with pytest.raises(ValueError):
        EssentialMatrix.from_pose(POSE).recondition(-1.0, 50)