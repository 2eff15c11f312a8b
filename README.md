# flightx

Data-side building blocks for a flight-simulator renderer, written with NumPy.

- `flightx.rgbe`: reads and writes Radiance RGBE (`.hdr`) images, flat or
  run-length encoded.
- `flightx.cubemap`: cuts a vertical-cross HDR image into six cube-map faces.
- `flightx.wave`: FFT ocean surface synthesis from a Phillips spectrum
  (after Tessendorf).
- `flightx.ocean`: an animated ocean grid built on `Wave`, with its triangle
  indices and texture-format selection.
- `flightx.resources`: a `ResourceManager` that caches shader sources and `.ex5`
  volume textures by name.

## Install

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## RGBE images (`flightx.rgbe`)

- `read_hdr(path)` returns `(pixels, info)`. `pixels` is a float32 array of shape
  `(height, width, 3)` and `info` is a `HeaderInfo`.
- `read_header(stream)` returns `(width, height, info)`. `HeaderInfo` has the fields
  `programtype`, `gamma` and `exposure`. A field is `None` when the header does not
  give it.
- `write_header(stream, width, height, info=None)` writes a minimal header. The
  program type defaults to `RGBE`.
- Flat pixels:
  - `write_pixels(stream, data)` writes float pixels.
  - `read_pixels(stream, count)` reads floats of shape `(count, 3)`.
  - `read_pixels_raw(stream, count)` reads raw bytes of shape `(count, 4)`.
- Whole scanlines:
  - `write_pixels_rle(stream, data, scanline_width, num_scanlines)` writes
    run-length-encoded scanlines. It writes flat pixels when the width is below 8 or
    above 32767.
  - `read_pixels_rle(...)` and `read_pixels_raw_rle(...)` read scanlines back. They
    accept flat data as well.
- `float_to_rgbe(r, g, b)` and `rgbe_to_float(rgbe)` convert a single pixel.

Short reads, a missing `FORMAT=` line, a wrong scanline width or bad run-length data
raise `RGBEError`.

```python
import io
import numpy as np
from flightx.rgbe import write_header, write_pixels_rle, read_header, read_pixels_rle

pixels = np.random.default_rng(0).random((16 * 4, 3))
buf = io.BytesIO()
write_header(buf, 16, 4)
write_pixels_rle(buf, pixels, 16, 4)

buf.seek(0)
width, height, info = read_header(buf)
decoded = read_pixels_rle(buf, width, height)   # shape (64, 3)
```

## Cube maps (`flightx.cubemap`)

The input image is a vertical cross, three faces wide and four faces tall.

- `extract_faces(data, width, height)` splits the cross into six `CubeFace` objects.
  They come in the order given by `FACE_NAMES`: +Y, -Y, +X, -X, +Z, -Z. The -Z face
  is flipped on both axes.
- `load_cross_cubemap(path)` does the same for an `.hdr` file.
- `flip_horizontal(face)` reverses the rows of a face and `flip_vertical(face)`
  reverses each row. Both return a new face.

```python
from flightx.cubemap import load_cross_cubemap

for face in load_cross_cubemap("uffizi_cross.hdr"):
    print(face.width, face.height)
```

## Ocean waves (`flightx.wave`, `flightx.ocean`)

`Wave` takes the following arguments:

- the grid size `n` and `m`
- `length_x` and `length_z`
- the wind direction `wind` and `wind_speed`
- `amplitude`
- `choppiness` (default 1.0)
- an optional `seed`

`build_field(time)` returns the displaced positions and the normals, each of shape
`(n * m, 3)`. It also stores them in `height_field` and `normal_field`.

```python
from flightx.wave import Wave

wave = Wave(64, 64, 1024.0, 1024.0, (0.01, 0.0), 10.0, 3e-7, 1.0, seed=1)
positions, normals = wave.build_field(0.5)
```

`Ocean(width, height, resolution=320, seed=None)` wraps a square `Wave`:

- `advance(delta_time)` moves its clock forward and rebuilds the surface.
- `height_min` and `height_max` track the lowest and highest heights seen so far.
- `indices` (from `grid_indices(n, m)`) and `index_count` describe the triangle mesh.
- `vertex_data` packs positions, then normals, as float32.

`format_from_channels(channels, is_float, half_precision=False)` returns a pair of
`TextureFormat` members: the internal format and the pixel format.

```python
from flightx.ocean import Ocean

ocean = Ocean(1280, 720, resolution=64, seed=1)
positions, normals = ocean.advance(0.016)
```

## Resources (`flightx.resources`)

`ResourceManager` caches resources by name:

- `load_shader(name, vertex_path, fragment_path=None, geometry_path=None)` reads the
  stage sources into a `ShaderSources`.
- `load_volume(path, name)` reads a `.ex5` file into a `Volume` with RGBA data of
  shape `(depth, height, width, 4)`.

Loading a name that is already stored returns the cached value. `get_shader`,
`get_volume` and `clear` complete the API. An unknown name raises `KeyError`.

The same readers are also available on their own as `read_shader_sources` and
`load_ex5`.

## What it does not do

This package contains no rendering. It does not:

- open a window or read the keyboard;
- compile shaders (it only reads their source text);
- upload textures or meshes;
- simulate or draw an aircraft.

It has no command-line program. It produces the data that a renderer would consume.