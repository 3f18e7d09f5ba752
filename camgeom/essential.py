"""Essential matrices and the relative camera poses they encode."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np

_W = np.array([[0.0, -1.0, 0.0], [1.0, 0.0, 0.0], [0.0, 0.0, 1.0]])
_PAIRS = ((0, 1), (0, 2), (1, 2))
_MACHINE_EPSILON = float(np.finfo(float).eps)
_RANK_TOLERANCE = 1e-10


def _cross_matrix(vector: np.ndarray) -> np.ndarray:
    x, y, z = vector
    return np.array([[0.0, -z, y], [z, 0.0, -x], [-y, x, 0.0]])


def _fill_direction(columns: list[np.ndarray]) -> np.ndarray:
    """Return a unit vector orthogonal to the given orthonormal columns."""
    candidates = []
    for axis in np.eye(3):
        residual = axis - sum((column @ axis) * column for column in columns)
        candidates.append(residual)
    best = max(candidates, key=np.linalg.norm)
    return best / np.linalg.norm(best)


def _svd(matrix: np.ndarray, epsilon: float, max_iterations: int):
    """One-sided Jacobi SVD of a 3x3 matrix, singular values sorted descending.

    ``max_iterations`` bounds the number of sweeps; ``0`` means no bound.
    Raises :class:`numpy.linalg.LinAlgError` if it does not converge in time.
    """
    if epsilon < 0:
        raise ValueError("epsilon must not be negative")
    if max_iterations < 0:
        raise ValueError("max_iterations must not be negative")
    threshold = max(epsilon, _MACHINE_EPSILON)
    work = np.array(matrix, dtype=float).reshape(3, 3)
    v = np.eye(3)
    sweeps = 0
    while True:
        rotated = False
        for p, q in _PAIRS:
            alpha = work[:, p] @ work[:, p]
            beta = work[:, q] @ work[:, q]
            gamma = work[:, p] @ work[:, q]
            if alpha == 0.0 or beta == 0.0:
                continue
            if abs(gamma) <= threshold * math.sqrt(alpha * beta):
                continue
            zeta = (beta - alpha) / (2.0 * gamma)
            t = math.copysign(1.0, zeta) / (abs(zeta) + math.hypot(1.0, zeta))
            if t == 0.0:
                continue
            c = 1.0 / math.hypot(1.0, t)
            s = c * t
            rotation = np.array([[c, s], [-s, c]])
            work[:, [p, q]] = work[:, [p, q]] @ rotation
            v[:, [p, q]] = v[:, [p, q]] @ rotation
            rotated = True
        sweeps += 1
        if not rotated:
            break
        if max_iterations and sweeps >= max_iterations:
            raise np.linalg.LinAlgError(
                f"SVD did not converge within {max_iterations} iterations"
            )

    sigmas = np.linalg.norm(work, axis=0)
    order = np.argsort(-sigmas, kind="stable")
    largest = sigmas[order[0]]
    columns: list[np.ndarray] = []
    for index in order:
        vector = work[:, index] - sum((column @ work[:, index]) * column for column in columns)
        norm = np.linalg.norm(vector)
        if largest == 0.0 or norm <= _RANK_TOLERANCE * largest:
            columns.append(_fill_direction(columns))
        else:
            columns.append(vector / norm)
    u = np.column_stack(columns)
    vt = v[:, order].T
    return u, sigmas[order], vt


@dataclass(frozen=True, eq=False)
class RelativePose:
    """A rigid transform from the space of one camera into another."""

    rotation: np.ndarray = field(default_factory=lambda: np.eye(3))
    translation: np.ndarray = field(default_factory=lambda: np.zeros(3))

    def __post_init__(self) -> None:
        object.__setattr__(self, "rotation", np.asarray(self.rotation, dtype=float).reshape(3, 3))
        object.__setattr__(self, "translation", np.asarray(self.translation, dtype=float).reshape(3))

    def transform(self, point) -> np.ndarray:
        """Map a 3D point from the source camera into the target camera."""
        return self.rotation @ np.asarray(point, dtype=float) + self.translation

    def inverse(self) -> RelativePose:
        """Return the transform going the opposite way."""
        rotation_t = self.rotation.T
        return RelativePose(rotation_t, -(rotation_t @ self.translation))


@dataclass(frozen=True, eq=False)
class EssentialMatrix:
    """An essential matrix ``E`` satisfying ``x'^T E x = 0`` for matching points."""

    matrix: np.ndarray

    def __post_init__(self) -> None:
        object.__setattr__(self, "matrix", np.asarray(self.matrix, dtype=float).reshape(3, 3))

    @classmethod
    def from_pose(cls, pose: RelativePose) -> EssentialMatrix:
        """Build the essential matrix of a relative camera pose."""
        return cls(_cross_matrix(pose.translation) @ pose.rotation)

    def recondition(self, epsilon: float, max_iterations: int) -> EssentialMatrix:
        """Return the closest valid essential matrix in the Frobenius sense."""
        u, sigmas, vt = _svd(self.matrix, epsilon, max_iterations)
        average = (sigmas[0] + sigmas[1]) / 2.0
        return EssentialMatrix(u @ np.diag([average, average, 0.0]) @ vt)

    def possible_rotations_unscaled_translation(self, epsilon: float, max_iterations: int):
        """Return two candidate rotations and a translation of unknown scale and sign."""
        u, _, vt = _svd(self.matrix, epsilon, max_iterations)
        # The last singular vectors are undetermined; pick them to make proper rotations.
        if np.linalg.det(u) < 0.0:
            u[:, 2] *= -1.0
        if np.linalg.det(vt) < 0.0:
            vt[2, :] *= -1.0
        return u @ _W @ vt, u @ _W.T @ vt, u[:, 2].copy()

    def possible_rotations(self, epsilon: float, max_iterations: int):
        """Return the two rotations this matrix allows."""
        rot_a, rot_b, _ = self.possible_rotations_unscaled_translation(epsilon, max_iterations)
        return rot_a, rot_b

    def possible_unscaled_poses(self, epsilon: float, max_iterations: int):
        """Return the four poses (two rotations, both translation signs)."""
        rot_a, rot_b, t = self.possible_rotations_unscaled_translation(epsilon, max_iterations)
        return (
            RelativePose(rot_a, t),
            RelativePose(rot_b, t),
            RelativePose(rot_a, -t),
            RelativePose(rot_b, -t),
        )

    def possible_unscaled_poses_bearing(self, epsilon: float, max_iterations: int):
        """Return the two poses sharing one translation direction."""
        rot_a, rot_b, t = self.possible_rotations_unscaled_translation(epsilon, max_iterations)
        return RelativePose(rot_a, t), RelativePose(rot_b, t)

    def residual(self, a, b) -> float:
        """Epipolar residual of bearing ``a`` in the first camera and ``b`` in the second."""
        a = np.asarray(a, dtype=float)
        b = np.asarray(b, dtype=float)
        return float(abs((b / b[2]) @ self.matrix @ (a / a[2])))