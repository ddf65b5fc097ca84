# quadplay

quadplay plays a black-and-white video as a quadtree. Each frame is
thresholded on its first channel into a one-bit image. That image is cut into
a quadtree of the chosen depth, and each largest node that is wholly white is
drawn as one rectangle. Frames are decoded a few segments at a time on a
background worker. Only the decoded quadtree nodes of those segments are kept,
not the whole clip.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Running

```
quadplay [VIDEO] [AUDIO] [options]
```

`VIDEO` defaults to `Assets/BadApple.mp4` and `AUDIO` defaults to
`Assets/BadApple.wav`. If either file is missing, the command names the
missing files and exits with status 1. It does the same if the video cannot
be decoded.

The audio is played through the pygame mixer. Playback time is kept by a wall
clock that is started, paused and moved together with the audio. If the mixer
cannot load the audio, the player says so and plays without sound.

Options:

- `--depth N`: quadtree depth, from 1 to 10 (default 8).
- `--frames-per-segment N`: frames decoded per segment (default 120).
- `--load-segments N`: number of segments loaded at a time (default 3).
- `--show-tree`: colour each node by its quadtree space and outline it.
- `--no-keep-aspect`: stretch the video over the whole window.
- `--no-fill-outside`: leave the area around the video black.
- `--max-fps N`: frame-rate cap; 0, the default, sets no cap.
- `--width N`, `--height N`: initial window size (default 960 x 720). The
  window can be resized.

Keys while playing:

| Key | Action |
| --- | --- |
| Space | play, pause or resume |
| Home / End | jump to the start or the end and stop |
| Left / Right | seek 5 seconds back or forward |
| Up / Down | raise or lower the quadtree depth |
| T | toggle tree colouring |
| A | toggle keeping the aspect ratio |
| F | toggle filling the area outside the video |
| Esc / Q | quit |

The window title shows the play time, the total time and the frame rate. A
bar along the bottom of the window shows each segment:

- grey: not loaded
- green: loaded
- cyan: the segment that holds the seek position, with a red mark at that
  position

## Using it as a library

```python
from quadplay.video import open_video, SegmentedVideo
from quadplay.player import AnimationPlayer, WallClock

with SegmentedVideo(open_video("clip.mp4"), quad_tree_depth=8,
                    frames_per_segment=120, load_segment_count=3) as video:
    player = AnimationPlayer(video, WallClock())
    player.play()
    player.update()
    nodes = player.current_frame   # list of QuadTreeNode
```

The modules are:

- `quadplay.quadtree`: `QuadTree`, `QuadTreeNode` and `SpaceColor`, plus the
  helpers `morton_to_position` and `pixel_color`.
  `QuadTree.white_nodes(bits)` takes an MSB-first packed one-bit image.
- `quadplay.video`:
  - `SegmentedVideo`, with `fetch`, `move_seek` and the setters for depth,
    frames per segment and loaded segment count.
  - `ArrayVideoSource`, a video held in memory as a NumPy array.
  - `open_video`, which decodes a file with imageio.
  - `pack_frame`, `range_diff`, `VideoInfo` and `SegmentPart`.
- `quadplay.player`:
  - `AnimationPlayer`, with `play`, `stop`, `pause`, `resume`, `update` and
    the settable `play_time`.
  - The clock protocol `AudioClock`.
  - `WallClock`, a clock driven by real time.
- `quadplay.render`: `RectangleRenderer`, which draws nodes on a pygame
  surface. Its helpers are `fit_rect` and `outside_rects`.
- `quadplay.timeline`: `format_time`, `segment_states`, `seek_fraction` and
  `SegmentState`.
- `quadplay.fps`: `FPSCounter`.
- `quadplay.common`: `Vec2`, `Color`, `quad_spaces`, `remap`, `node_color`,
  `node_display_rect`, `fit_display_size` and the shared constants.

## What it does not do

- There is no on-screen settings panel. Frames per segment and the number of
  loaded segments can only be set on the command line. The quadtree depth and
  the display toggles can also be changed with the keys above.
- Nodes are only drawn as filled rectangles in one window. The package has no
  plot-based view and no view that draws each node as a separate window.
- It does not show the source video frame next to the quadtree view.
- Decoding is done with imageio, which reads the whole video into memory
  before segmenting begins.