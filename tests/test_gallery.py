"""Tests for gallery templates and generation filters."""

from __future__ import annotations

from urllib.parse import parse_qs, urlsplit

import pytest

import db
from modules.gallery.service import (
    categories,
    filter_templates,
    get_template,
    list_user_generations,
    template_studio_url,
)
from modules.gallery.settings import TEMPLATES


def _generation(user_id: int, task_id: str) -> dict:
    return db.create_generation(
        user_id,
        task_id=task_id,
        prompt="Sunset over the sea",
        mode="text-to-video",
        model="seedance-2.0",
        duration=5,
        quality="720p",
        aspect_ratio="16:9",
        generate_audio=False,
        cost=10,
    )


def test_six_templates_with_all_category_first() -> None:
    assert len(TEMPLATES) == 6
    assert categories()[0] == "All"
    assert len(categories()) == len(set(categories()))


def test_filter_templates_by_category() -> None:
    assert len(filter_templates("All")) == 6
    assert len(filter_templates(None)) == 6
    nature = filter_templates("Nature")
    assert nature and all(t["category"] == "Nature" for t in nature)
    assert filter_templates("Nope") == []


def test_template_studio_url_prefills_settings() -> None:
    template = get_template("tpl-1")

    url = urlsplit(template_studio_url(template))
    query = parse_qs(url.query)

    assert url.path == "/studio"
    assert query["prompt"] == [template["prompt"]]
    assert query["mode"] == ["text-to-video"]
    assert query["duration"] == ["10"]
    assert query["quality"] == ["1080p"]
    assert query["aspectRatio"] == ["16:9"]
    assert query["audio"] == ["true"]


def test_get_template_unknown() -> None:
    assert get_template("tpl-99") is None


def test_list_user_generations_filters_by_status(make_user) -> None:
    user, _ = make_user()
    done = _generation(user["user_id"], "t1")
    _generation(user["user_id"], "t2")
    db.update_generation(done["id"], status="completed", progress=100, video_url="https://cdn/v.mp4")

    assert len(list_user_generations(user["user_id"])) == 2
    assert [g["id"] for g in list_user_generations(user["user_id"], "completed")] == [done["id"]]
    assert len(list_user_generations(user["user_id"], "processing")) == 1
    assert list_user_generations(user["user_id"], "failed") == []

    with pytest.raises(ValueError):
        list_user_generations(user["user_id"], "archived")


def test_delete_generation_is_scoped_to_owner(make_user) -> None:
    owner, _ = make_user()
    other, _ = make_user()
    generation = _generation(owner["user_id"], "t1")

    assert db.delete_generation(other["user_id"], generation["id"]) is False
    assert db.delete_generation(owner["user_id"], generation["id"]) is True
    assert db.list_generations(owner["user_id"]) == []
