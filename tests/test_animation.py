"""Tests for frame timelines and loop expansion."""

import pytest
from conftest import node

from xmlforge.compiler import AnimationCompiler
from xmlforge.compiler.animation import loop_count
from xmlforge.errors import DefinitionError
from xmlforge.models import UVCoords, Vec2

TEXTURE = Vec2(x=128, y=128)


def compile_first(xml: str, texture_size: Vec2 | None = TEXTURE):
    return AnimationCompiler().compile(node(xml)[0], texture_size)


def test_size_from_group():
    animation = compile_first("""
        <animations w="48" h="44">
          <animation id="moot"><frame x="32" y="16"/></animation>
        </animations>
    """)
    assert animation.get_value() == UVCoords.from_pixels(
        Vec2(x=32, y=16), Vec2(x=48, y=44), TEXTURE,
    )


def test_size_from_animation():
    animation = compile_first("""
        <animations w="48" h="48">
          <animation id="moot" w="24" h="22"><frame x="32" y="16"/></animation>
        </animations>
    """)
    assert animation.get_value() == UVCoords.from_pixels(
        Vec2(x=32, y=16), Vec2(x=24, y=22), TEXTURE,
    )


def test_size_from_frame():
    animation = compile_first("""
        <animations w="48" h="48">
          <animation id="moot" w="24" h="22"><frame x="32" y="16" w="12" h="11"/></animation>
        </animations>
    """)
    assert animation.get_value() == UVCoords.from_pixels(
        Vec2(x=32, y=16), Vec2(x=12, y=11), TEXTURE,
    )


def test_partial_size_falls_through():
    # Only w on the frame: both attributes are needed, so the animation size wins.
    animation = compile_first("""
        <animations>
          <animation id="moot" w="24" h="22"><frame w="10"/></animation>
        </animations>
    """)
    assert animation.get_value() == UVCoords.from_pixels(Vec2(), Vec2(x=24, y=22), TEXTURE)


def test_missing_size_names_animation():
    with pytest.raises(DefinitionError, match='Frame size not defined in animation "moot"'):
        compile_first("""
            <animations>
              <animation id="moot"><frame x="1" y="1"/></animation>
            </animations>
        """)


def test_missing_texture_size():
    with pytest.raises(DefinitionError, match="known size"):
        compile_first(
            '<animations w="4" h="4"><animation id="moot"><frame/></animation></animations>',
            texture_size=None,
        )


def test_loop_duplicates_single_frame():
    animation = compile_first("""
        <animations w="48" h="48">
          <animation id="moot" w="24" h="22">
            <loop count="13"><frame x="32" y="16" duration="1"/></loop>
          </animation>
        </animations>
    """)
    assert animation.length == 13
    assert animation.duration == 13


def test_loop_duplicates_mixed_frames():
    animation = compile_first("""
        <animations w="48" h="48">
          <animation id="moot" w="20" h="10">
            <frame x="1" y="1" duration="13"/>
            <frame x="1" y="1" duration="19"/>
            <loop count="2">
              <frame x="1" y="1" duration="1"/>
              <frame x="2" y="2" duration="2"/>
            </loop>
            <frame x="3" y="3" duration="16"/>
            <frame x="4" y="4" duration="8"/>
            <loop count="3">
              <frame x="5" y="5" duration="4"/>
            </loop>
            <frame x="6" y="6" duration="8"/>
          </animation>
        </animations>
    """)
    assert animation.length == 12
    assert [frame.duration for frame in animation.frames] == [
        13, 19, 1, 2, 1, 2, 16, 8, 4, 4, 4, 8,
    ]


def test_adjacent_loops_flush_separately():
    animation = compile_first("""
        <animations>
          <animation id="pulse" w="8" h="8">
            <loop count="2"><frame duration="1"/></loop>
            <loop count="3"><frame duration="2"/></loop>
          </animation>
        </animations>
    """)
    assert [frame.duration for frame in animation.frames] == [1, 1, 2, 2, 2]


@pytest.mark.parametrize(
    ("count", "expected"),
    [(None, 1), ("0", 1), ("abc", 1), ("4", 4), ("3x", 3)],
)
def test_loop_count(count, expected):
    loop = node("<loop/>") if count is None else node(f'<loop count="{count}"/>')
    assert loop_count(loop) == expected


def test_group_and_missing_duration():
    animation = compile_first("""
        <animations w="8" h="8">
          <animation id="run-fire" group="run"><frame/><frame duration="0"/></animation>
        </animations>
    """)
    assert animation.group == "run"
    assert [frame.duration for frame in animation.frames] == [None, None]
    assert animation.duration == 0


def test_ungrouped_animation_has_no_group():
    animation = compile_first('<animations w="8" h="8"><animation id="idle"><frame/></animation></animations>')
    assert animation.group is None


def test_uv_triangles():
    uv = UVCoords.from_pixels(Vec2(), Vec2(x=48, y=48), Vec2(x=256, y=256))
    first, second = uv.triangles
    assert first == [(0, 1), (0, 0.8125), (0.1875, 1)]
    assert second == [(0, 0.8125), (0.1875, 0.8125), (0.1875, 1)]
