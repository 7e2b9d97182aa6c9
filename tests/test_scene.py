"""Tests for scene compilation: pools, layout, behaviors, events and the settle pass."""

import asyncio
import logging
from unittest.mock import AsyncMock, patch

import pytest

from xmlforge.compiler import SceneCompiler
from xmlforge.engine import Entity, Scene, World
from xmlforge.errors import DefinitionError
from xmlforge.models import CameraPath, Vec2, Vec3

POOL_XML = """
<objects>
  <textures><texture id="crates" url="small.png"/></textures>
  <animations><animation id="still" w="16" h="16"><frame/></animation></animations>
  <object id="Crate"><geometry type="plane" w="16" h="16"/></object>
</objects>
"""

SCENE_XML = """
<scene name="Level 1">
  <audio>
    <clip id="theme" src="jump.ogg"/>
  </audio>
  <camera smoothing="13.5">
    <position x="10" y="20" z="150"/>
    <path>
      <window x1="0" y1="0" x2="100" y2="50"/>
      <constraint x1="0" y1="0" z1="150" x2="100" y2="50" z2="150"/>
    </path>
  </camera>
  <gravity x="0" y="-20"/>
  <events>
    <event name="start">
      <action type="emit-audio" id="theme"/>
    </event>
    <after>
      <action type="goto-scene" id="level-2"/>
    </after>
  </events>
  <sequences>
    <sequence id="outro">
      <step><action type="emit-audio" id="theme"/></step>
    </sequence>
  </sequences>
  <objects>
    <textures><texture id="tiles" url="sheet.png"/></textures>
    <animations><animation id="spin" w="16" h="16"><frame/></animation></animations>
    <object id="Coin"><geometry type="plane" w="16" h="16"/></object>
  </objects>
  <objects src="pool.xml"/>
  <layout>
    <objects>
      <object id="Coin" instance-id="coin-1" x="32" y="64" dir="-1" scale="2"/>
      <object id="Crate" x="1" y="2">
        <trait name="solid" attack="top"/>
      </object>
    </objects>
    <behaviors>
      <solids><rect x="0" y="-16" w="256" h="16"/></solids>
      <climbables><rect x="100" y="0" w="16" h="64"/></climbables>
      <deathzones><rect x="-500" y="-500" w="1000" h="10"/></deathzones>
    </behaviors>
  </layout>
</scene>
"""


@pytest.fixture
def scene_node(write_document):
    write_document(POOL_XML, name="pool.xml")
    return write_document(SCENE_XML, name="level-1.xml")


@pytest.mark.asyncio
async def test_scene_properties(loader, scene_node):
    compiler = SceneCompiler(loader, scene_node)
    scene = await compiler.get_scene()

    assert scene.name == "Level 1"
    assert scene.world.gravity == Vec2(x=0, y=-20)
    assert scene.camera.smoothing == 13.5
    assert scene.camera.position == Vec3(x=10, y=20, z=150)
    assert scene.camera.paths == [
        CameraPath(
            window=(Vec3(x=0, y=0), Vec3(x=100, y=50)),
            constraint=(Vec3(x=0, y=0, z=150), Vec3(x=100, y=50, z=150)),
        ),
    ]
    assert scene.audio["theme"].data.startswith(b"OggS")
    assert "outro" in scene.sequencer.sequences


@pytest.mark.asyncio
async def test_object_pools_merge(loader, scene_node):
    compiler = SceneCompiler(loader, scene_node)
    await compiler.get_scene()
    assert set(compiler.objects) == {"Coin", "Crate"}


@pytest.mark.asyncio
async def test_layout_placements(loader, scene_node):
    compiler = SceneCompiler(loader, scene_node)
    scene = await compiler.get_scene()

    coin, crate = (placement.instance for placement in compiler.layout)
    assert coin.id == "coin-1"
    assert coin.name == "Coin"
    assert coin.direction == Vec2(x=-1, y=0)
    assert coin.position == Vec3(x=32, y=64, z=0)
    assert coin.model.scale == Vec3(x=2, y=2, z=2)

    assert crate.id is None
    assert crate.direction == Vec2(x=1, y=0)
    assert crate.position == Vec3(x=1, y=2, z=0)
    assert crate.model.scale == Vec3(x=1, y=1, z=1)
    assert crate.get_trait("solid").attack_accept == ["top"]

    assert compiler.layout[0].source_node is compiler.objects["Coin"].node
    assert coin.world is scene.world
    assert scene.world.objects[-2:] == [coin, crate]


@pytest.mark.asyncio
async def test_behaviors(loader, scene_node):
    compiler = SceneCompiler(loader, scene_node)
    scene = await compiler.get_scene()

    solid, climbable, death_zone = (placement.instance for placement in compiler.behaviors)
    assert solid.get_trait("solid").fixed is True
    assert solid.get_trait("solid").obstructs is True
    assert solid.position == Vec3(x=0, y=-16, z=0)
    assert (solid.collision[0].w, solid.collision[0].h) == (256, 16)
    assert climbable.get_trait("climbable") is not None
    assert death_zone.get_trait("death_zone") is not None
    assert scene.world.objects[:3] == [solid, climbable, death_zone]


@pytest.mark.asyncio
async def test_settles_world_exactly_once(loader, scene_node):
    compiler = SceneCompiler(loader, scene_node)
    with patch.object(World, "simulate_time", autospec=True) as simulate:
        scene = await compiler.get_scene()
        again = await compiler.get_scene()
    assert scene is again
    simulate.assert_called_once_with(scene.world, 0)


@pytest.mark.asyncio
async def test_waits_for_outstanding_resources(loader, scene_node):
    compiler = SceneCompiler(loader, scene_node)
    with patch.object(loader.resource_loader, "complete", wraps=loader.resource_loader.complete) as complete:
        await compiler.get_scene()
    complete.assert_awaited_once()
    assert loader.resource_loader.pending == 0


@pytest.mark.asyncio
async def test_start_event_bound_to_scene(loader, scene_node):
    scene = await SceneCompiler(loader, scene_node).get_scene()
    played = []
    scene.events.bind(Scene.EVENT_AUDIO, played.append)
    loader.game.set_scene(scene)
    assert played == [scene.audio["theme"]]


@pytest.mark.asyncio
async def test_goto_scene_after_end(loader, scene_node):
    scene = await SceneCompiler(loader, scene_node).get_scene()
    next_scene = Scene()
    next_scene.name = "Level 2"

    with patch.object(loader, "load_scene_by_name", AsyncMock(return_value=next_scene)) as load:
        scene.events.trigger(Scene.EVENT_END)
        for _ in range(20):
            if loader.game.scene is next_scene:
                break
            await asyncio.sleep(0)

    load.assert_awaited_once_with("level-2")
    assert loader.game.scene is next_scene


@pytest.mark.asyncio
async def test_undefined_layout_object(loader, write_document):
    root = write_document("""
        <scene>
          <layout><objects><object id="Ghost"/></objects></layout>
        </scene>
    """)
    with pytest.raises(DefinitionError, match='Object "Ghost" not defined.'):
        await SceneCompiler(loader, root).get_scene()


@pytest.mark.asyncio
async def test_layout_object_from_resources(loader, write_document):
    loader.resources.add("object", "Explosion", Entity)
    root = write_document("""
        <scene>
          <layout><objects><object id="Explosion" instance-id="boom"/></objects></layout>
        </scene>
    """)
    compiler = SceneCompiler(loader, root)
    await compiler.get_scene()
    placement = compiler.layout[0]
    assert type(placement.instance) is Entity
    assert placement.instance.id == "boom"
    assert placement.constructor is Entity
    assert placement.source_node is None


@pytest.mark.asyncio
async def test_later_pool_overwrites(loader, write_document):
    root = write_document("""
        <scene>
          <objects>
            <textures><texture url="sheet.png"/></textures>
            <object id="Coin" variant="first"/>
          </objects>
          <objects>
            <textures><texture url="sheet.png"/></textures>
            <object id="Coin" variant="second"/>
          </objects>
        </scene>
    """)
    compiler = SceneCompiler(loader, root)
    await compiler.get_scene()
    assert compiler.objects["Coin"].node.get("variant") == "second"


@pytest.mark.asyncio
async def test_unknown_behavior(loader, write_document):
    root = write_document("""
        <scene>
          <layout><behaviors><ladders><rect w="1" h="1"/></ladders></behaviors></layout>
        </scene>
    """)
    with pytest.raises(DefinitionError, match='Behavior "ladders" not in behavior map'):
        await SceneCompiler(loader, root).get_scene()


@pytest.mark.asyncio
async def test_unknown_global_event(loader, write_document):
    root = write_document("""
        <scene>
          <events><before><action type="goto-scene" id="x"/></before></events>
        </scene>
    """)
    with pytest.raises(DefinitionError, match="No matching event for before > goto-scene"):
        await SceneCompiler(loader, root).get_scene()


def test_rejects_other_roots(loader, write_document):
    with pytest.raises(TypeError, match='must match selector "scene"'):
        SceneCompiler(loader, write_document("<level/>"))


@pytest.mark.asyncio
async def test_empty_scene(loader, write_document):
    with patch.object(World, "simulate_time", autospec=True) as simulate:
        scene = await SceneCompiler(loader, write_document("<scene/>")).get_scene()
    assert scene.name is None
    assert scene.world.objects == []
    assert scene.world.gravity == Vec2(x=0, y=-9.81)
    simulate.assert_called_once_with(scene.world, 0)


def test_goto_scene_from_synchronous_code(loader, scene_node):
    scene = asyncio.run(SceneCompiler(loader, scene_node).get_scene())
    next_scene = Scene()

    with patch.object(loader, "load_scene_by_name", AsyncMock(return_value=next_scene)) as load:
        scene.events.trigger(Scene.EVENT_END)

    load.assert_awaited_once_with("level-2")
    assert loader.game.scene is next_scene


def test_goto_unknown_scene_from_synchronous_code(loader, scene_node):
    scene = asyncio.run(SceneCompiler(loader, scene_node).get_scene())
    with pytest.raises(DefinitionError, match='Scene "level-2" not defined.'):
        scene.events.trigger(Scene.EVENT_END)


@pytest.mark.asyncio
async def test_failed_goto_scene_is_logged(loader, scene_node, caplog):
    compiler = SceneCompiler(loader, scene_node)
    scene = await compiler.get_scene()

    with caplog.at_level(logging.ERROR, logger="xmlforge.compiler.scene"):
        scene.events.trigger(Scene.EVENT_END)
        for _ in range(20):
            if "failed" in caplog.text:
                break
            await asyncio.sleep(0)

    assert not compiler._transitions
    assert 'Switching to scene level-2 failed: Scene "level-2" not defined.' in caplog.text


@pytest.mark.asyncio
async def test_layout_trait_already_on_object(loader, write_document):
    root = write_document("""
        <scene>
          <objects>
            <textures><texture url="sheet.png"/></textures>
            <object id="Crate">
              <traits><trait name="solid"/></traits>
            </object>
          </objects>
          <layout>
            <objects>
              <object id="Crate"><trait name="solid" attack="top"/></object>
            </objects>
          </layout>
        </scene>
    """)
    with pytest.raises(DefinitionError, match='Trait "solid" already applied to object "Crate"'):
        await SceneCompiler(loader, root).get_scene()
