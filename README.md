# camgeom

Geometry helpers for multi-view computer vision, built on numpy arrays.

## Modules

### `camgeom.camera`

- `CameraIntrinsics(focals, principal_point, skew)` holds pinhole intrinsics
  in pixels. `CameraIntrinsics.identity()` gives intrinsics whose `matrix()`
  is the identity; `with_focals`, `with_focal`, `with_principal_point` and
  `with_skew` return modified copies. `calibrate(point)` turns a pixel
  position into a unit bearing vector; `uncalibrate(bearing)` turns it back,
  returning `None` if the bearing points backwards (negative z).
- `CameraIntrinsicsK1Distortion(simple_intrinsics, k1)` adds one radial
  distortion coefficient. Its `uncalibrate` also returns `None` when no real
  distortion radius exists for the bearing.
- `CameraSpecification(pixels, pixel_dimensions)` describes a sensor.
  `from_sensor(pixels, sensor_dimensions)` and
  `from_sensor_square(pixels, sensor_width)` compute the pixel size;
  `intrinsics_centered(focal)` builds `CameraIntrinsics` with that focal and
  a principal point at half the pixel dimensions minus 0.5.
- `pose_reprojection_error(pose, a, b, triangulator)` returns the two 2D
  reprojection errors (in focal lengths) of a bearing match `a` -> `b` under
  a `RelativePose`, or `None` if triangulation fails or the point is behind a
  camera. `average_pose_reprojection_error` returns the mean of their norms.

### `camgeom.essential`

- `RelativePose(rotation, translation)` maps points from one camera's space
  into another's: `transform(point)` and `inverse()`.
- `EssentialMatrix(matrix)` satisfies `x'^T E x = 0` for matching points.
  `EssentialMatrix.from_pose(pose)` builds it from a pose.
  `recondition(epsilon, max_iterations)` returns the closest valid essential
  matrix (the two largest singular values averaged, the smallest zeroed).
  `possible_rotations_unscaled_translation` returns two candidate rotations
  and a translation direction of unknown scale and sign;
  `possible_rotations`, `possible_unscaled_poses` (four poses) and
  `possible_unscaled_poses_bearing` (two poses) are built on it.
  `residual(a, b)` gives the epipolar residual of a bearing match.

These methods use a Jacobi SVD: `epsilon` is its convergence threshold and
`max_iterations` bounds the number of sweeps (`0` means no bound). If it does
not converge in time, `numpy.linalg.LinAlgError` is raised; negative
arguments raise `ValueError`.

### `camgeom.bicubic`

`interpolate_bicubic(image, x, y, default)` samples an array of shape
`(height, width)` or `(height, width, channels)` at a sub-pixel position.
It returns `default` when the 4x4 neighbourhood does not fit inside the
image. Integer images keep their dtype, with values saturated to its range.

### `camgeom.export`

`export(stream, points_and_colors, cameras, camera_faces)` writes an ASCII
PLY file to a text stream. Each `ExportCamera(optical_center, up_direction,
forward_direction, focal_length)` becomes five magenta vertices (its centre
and four corners), written before the points; with `camera_faces` true, four
triangles per camera are written as a `face` element. Colours must be three
values in 0..255.

## Installation

```
pip install .
```

numpy is the only runtime dependency.

## Examples

```python
import numpy as np
from camgeom.camera import CameraIntrinsics

intrinsics = (
    CameraIntrinsics.identity()
    .with_focal(800.0)
    .with_principal_point(np.array([500.0, 600.0]))
)
bearing = intrinsics.calibrate(np.array([471.0, 322.0]))
pixel = intrinsics.uncalibrate(bearing)  # close to (471, 322)
```

Recovering rotations from an essential matrix:

```python
import numpy as np
from camgeom.essential import EssentialMatrix, RelativePose

pose = RelativePose(np.eye(3), np.array([-0.8, 0.4, 0.5]))
essential = EssentialMatrix.from_pose(pose)
rot_a, rot_b, t = essential.possible_rotations_unscaled_translation(1e-6, 50)
```

One of the two rotations matches the pose's rotation; `t` gives the
translation direction, with its sign undetermined.

Writing a point cloud:

```python
import numpy as np
from camgeom.export import export

with open("cloud.ply", "w") as stream:
    export(stream, [(np.array([0.0, 0.0, 1.0]), (255, 0, 0))], [], False)
```

## What it does not do

- No triangulator is included. `pose_reprojection_error` takes any object
  with a `triangulate_relative(pose, a, b)` method returning a 3D point in
  the first camera's space, or `None`.
- No image loading, feature detection, pose estimation from matches, or
  bundle adjustment; no reading of PLY files.
- There is no command-line tool; the package is used as a library.

## Tests

```
pip install .[test]
pytest
```