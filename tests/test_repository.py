"""Tests for the JSON scene repository: lookup order, listing, bad documents."""

import json
import logging

import pytest

from aware.models import EncounterScene, TextScene
from aware.repository import SceneRepository


def _lt(en):
    return {"en": en, "it": en, "ka": en, "fa": en}


def _text_doc(scene_id, first_line="hi"):
    return {
        "chapter": 1,
        "scene_id": scene_id,
        "scene_type": "text_message_thread",
        "nodes": [
            {"id": "m1", "type": "message_block", "sender": "Andreas", "messages": [_lt(first_line)]},
        ],
    }


@pytest.fixture
def dirs(tmp_path):
    user = tmp_path / "user"
    presets = tmp_path / "presets"
    user.mkdir()
    presets.mkdir()
    return user, presets


def _write(directory, name, doc):
    (directory / f"{name}.json").write_text(json.dumps(doc), encoding="utf-8")


def test_loads_preset(dirs):
    user, presets = dirs
    _write(presets, "intro", _text_doc("intro"))

    scene = SceneRepository(user, presets).load_text_scene("intro")
    assert isinstance(scene, TextScene)
    assert scene.scene_id == "intro"


def test_user_scene_overrides_preset(dirs):
    user, presets = dirs
    _write(presets, "intro", _text_doc("intro", "preset line"))
    _write(user, "intro", _text_doc("intro", "user line"))

    scene = SceneRepository(user, presets).load_text_scene("intro")
    assert scene.nodes[0].messages[0].en == "user line"


def test_missing_scene_is_none(dirs, caplog):
    user, presets = dirs
    with caplog.at_level(logging.WARNING):
        assert SceneRepository(user, presets).load_text_scene("nope") is None
    assert "nope" in caplog.text


def test_invalid_scene_is_none(dirs, caplog):
    user, presets = dirs
    (user / "broken.json").write_text("{not json", encoding="utf-8")
    _write(user, "wrong_shape", {"chapter": "one"})

    repo = SceneRepository(user, presets)
    with caplog.at_level(logging.WARNING):
        assert repo.load_text_scene("broken") is None
        assert repo.load_text_scene("wrong_shape") is None
        assert repo.get_raw("broken") is None
    assert "broken" in caplog.text


def test_text_document_is_not_an_encounter(dirs):
    user, presets = dirs
    _write(user, "intro", _text_doc("intro"))
    assert SceneRepository(user, presets).load_encounter("intro") is None


@pytest.mark.parametrize("name", ["", "../secret", "a/b", "a\\b", ".hidden"])
def test_unsafe_names_are_rejected(dirs, name):
    user, presets = dirs
    (user.parent / "secret.json").write_text(json.dumps(_text_doc("secret")), encoding="utf-8")

    repo = SceneRepository(user, presets)
    assert repo.load_text_scene(name) is None
    assert repo.get_raw(name) is None


def test_list_scenes_merges_and_sorts(dirs):
    user, presets = dirs
    _write(presets, "b_scene", _text_doc("b"))
    _write(presets, "a_scene", _text_doc("a"))
    _write(user, "b_scene", _text_doc("b"))
    _write(user, "c_scene", _text_doc("c"))

    assert SceneRepository(user, presets).list_scenes() == ["a_scene", "b_scene", "c_scene"]


def test_without_presets(tmp_path):
    _write(tmp_path, "only", _text_doc("only"))
    repo = SceneRepository(tmp_path)
    assert repo.list_scenes() == ["only"]
    assert repo.get_raw("only")["scene_id"] == "only"


def test_get_raw_returns_document_as_stored(dirs):
    user, presets = dirs
    doc = _text_doc("intro")
    doc["nodes"].append({"id": "v", "type": "video_clip", "url": "x.mp4"})
    _write(user, "intro", doc)

    assert SceneRepository(user, presets).get_raw("intro") == doc


def test_loads_encounter(dirs):
    user, presets = dirs
    ending = {"threshold": 0, "post_scene_label": _lt("bye"), "final_texts": []}
    _write(presets, "meet", {
        "chapter": 1,
        "scene_id": "meet",
        "scene_type": "in_person_interaction",
        "location": _lt("Café"),
        "atmosphere": _lt("Rain."),
        "nodes": [],
        "endings": {"good": {**ending, "threshold": 14}, "neutral": {**ending, "threshold": 8}, "bad": ending},
    })

    scene = SceneRepository(user, presets).load_encounter("meet")
    assert isinstance(scene, EncounterScene)
    assert scene.endings.neutral.threshold == 8
