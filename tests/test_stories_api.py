import json
from datetime import datetime, timedelta, timezone

import pytest

from stories.service import flatten_timeline

T0 = datetime(2024, 10, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def story_data(memory_store):
    memory_store.data.update(
        {
            "clusters": [
                {"cluster_id": "c1", "cherry_pick": False},
                {"cluster_id": "c2", "cherry_pick": True},
            ],
            "cluster_articles": [
                {
                    "id": "s1",
                    "cluster_id": "c2",
                    "headline": "Trade deadline",
                    "summary": "Moves",
                    "content": "Details",
                    "image_url": "https://img.example.com/s1.jpg",
                    "created_at": T0,
                },
                {
                    "id": "s2",
                    "cluster_id": "c2",
                    "headline": "Older take",
                    "summary": None,
                    "content": None,
                    "image_url": None,
                    "created_at": T0 - timedelta(hours=1),
                },
                {
                    "id": "s3",
                    "cluster_id": "c2",
                    "headline": "Oldest take",
                    "summary": None,
                    "content": None,
                    "image_url": None,
                    "created_at": T0 - timedelta(hours=2),
                },
                {
                    "id": "a1",
                    "cluster_id": "c1",
                    "headline": "Not a story line",
                    "summary": None,
                    "content": None,
                    "image_url": None,
                    "created_at": T0 + timedelta(hours=1),
                },
            ],
            "cluster_article_int": [
                {"cluster_article_id": "s1", "language_code": "de", "headline": "Transferschluss", "summary": ""},
            ],
            "story_line_view": [
                {
                    "id": 1,
                    "cluster_id": "c2",
                    "view": "Offense",
                    "headline": "Offense view",
                    "introduction": "Intro",
                    "content": "Offense content",
                },
                {
                    "id": 2,
                    "cluster_id": "c2",
                    "view": "Defense",
                    "headline": "Defense view",
                    "introduction": None,
                    "content": "Defense content",
                },
            ],
            "story_line_view_int": [
                {
                    "story_line_view_id": 1,
                    "language_code": "de",
                    "view": "Angriff",
                    "headline": "Angriffsansicht",
                    "introduction": "Einleitung",
                    "content": None,
                },
            ],
        }
    )
    return memory_store


@pytest.mark.asyncio
async def test_story_lines_are_offset_paginated_and_translated(client, story_data):
    response = await client.get("/story_lines", params={"language_code": "de", "page_size": 2})

    assert response.status_code == 200
    body = response.json()
    assert body["data"] == [
        {"headline": "Transferschluss", "image_url": "https://img.example.com/s1.jpg", "cluster_id": "c2"},
        {"headline": "Older take", "image_url": None, "cluster_id": "c2"},
    ]
    assert body["pagination"] == {
        "page": 1,
        "limit": 2,
        "total": 3,
        "totalPages": 2,
        "hasNext": True,
        "hasPrev": False,
    }

    second = (await client.get("/story_lines", params={"language_code": "de", "page_size": 2, "page": 2})).json()
    assert [item["headline"] for item in second["data"]] == ["Oldest take"]
    assert second["pagination"]["hasNext"] is False
    assert second["pagination"]["hasPrev"] is True


@pytest.mark.asyncio
async def test_story_lines_in_base_language_skip_translations(client, story_data):
    body = (await client.get("/story_lines", params={"language_code": "en"})).json()

    assert [item["headline"] for item in body["data"]] == ["Trade deadline", "Older take", "Oldest take"]
    assert story_data.calls_to("cluster_article_int") == []


@pytest.mark.asyncio
async def test_story_lines_need_a_language(client, story_data):
    response = await client.get("/story_lines")

    assert response.status_code == 400
    assert response.json() == {"error": "Missing required parameter: language_code"}


@pytest.mark.asyncio
async def test_story_line_by_id(client, story_data):
    response = await client.get("/story_lines_by_id", params={"cluster_id": "c2", "language_code": "de"})

    assert response.status_code == 200
    assert response.json() == {
        "data": {
            "headline": "Transferschluss",
            "summary": "Moves",
            "content": "Details",
            "image_url": "https://img.example.com/s1.jpg",
            "views": [{"view": "Angriff", "id": 1}, {"view": "Defense", "id": 2}],
        }
    }


@pytest.mark.asyncio
async def test_story_line_by_id_survives_missing_views(client, story_data):
    story_data.fail("story_line_view")

    response = await client.get("/story_lines_by_id", params={"cluster_id": "c2", "language_code": "de"})

    assert response.status_code == 200
    assert response.json()["data"]["views"] == []


@pytest.mark.asyncio
async def test_story_line_by_id_errors(client, story_data):
    assert (await client.get("/story_lines_by_id", params={"language_code": "de"})).status_code == 400
    assert (await client.get("/story_lines_by_id", params={"cluster_id": "c2"})).status_code == 400

    missing = await client.get("/story_lines_by_id", params={"cluster_id": "c9", "language_code": "de"})
    assert missing.status_code == 404
    assert missing.json() == {"error": "Article not found"}


@pytest.mark.asyncio
async def test_story_line_view_falls_back_per_field(client, story_data):
    response = await client.get("/story_line_view_by_id", params={"story_line_view_id": 1, "language_code": "de"})

    assert response.json() == {
        "data": {
            "headline": "Angriffsansicht",
            "introduction": "Einleitung",
            "content": "Offense content",
            "language": "de",
        }
    }


@pytest.mark.asyncio
async def test_story_line_view_reports_base_language_when_untranslated(client, story_data):
    body = (await client.get("/story_line_view_by_id", params={"story_line_view_id": 2, "language_code": "fr"})).json()

    assert body["data"]["headline"] == "Defense view"
    assert body["data"]["language"] == "en"

    default = (await client.get("/story_line_view_by_id", params={"story_line_view_id": 2})).json()
    assert default["data"]["language"] == "en"


@pytest.mark.asyncio
async def test_story_line_view_errors(client, story_data):
    bad = await client.get("/story_line_view_by_id", params={"story_line_view_id": "one"})
    assert bad.status_code == 400

    missing = await client.get("/story_line_view_by_id", params={"story_line_view_id": 50})
    assert missing.status_code == 404
    assert missing.json() == {"error": "Story line view not found"}


FLAT_TIMELINE = {
    "cluster_id": "c2",
    "timeline": [
        {"headline": "Deal agreed", "summary": "Both sides agree", "created_at": "2024-09-30", "source_name": "ESPN"},
        {"headline": "", "summary": ""},
        {"headline": "Physical passed", "created_at": "2024-10-01", "source_name": "NFL.com"},
    ],
}
GROUPED_TIMELINE = {
    "timeline": [
        {
            "date": "2024-09-30",
            "articles": [
                {"headline": "Einigung", "summary": "Beide Seiten", "created_at": "2024-09-30", "source_name": "ESPN"},
            ],
        },
        {
            "date": "2024-10-01",
            "articles": [
                {"summary": "Medizincheck bestanden", "created_at": "2024-10-01", "source_name": "NFL.com"},
                {"headline": None, "summary": None},
            ],
        },
    ]
}


def test_flatten_flat_timeline():
    entries = flatten_timeline(FLAT_TIMELINE)

    assert entries == [
        {
            "headline": "Deal agreed",
            "instruction": "Both sides agree",
            "content": "Both sides agree",
            "created_at": "2024-09-30",
            "source_name": "ESPN",
        },
        {
            "headline": "Physical passed",
            "instruction": "",
            "content": "",
            "created_at": "2024-10-01",
            "source_name": "NFL.com",
        },
    ]


def test_flatten_grouped_timeline_from_json_text():
    entries = flatten_timeline(json.dumps(GROUPED_TIMELINE))

    assert [entry["headline"] for entry in entries] == ["Einigung", ""]
    assert entries[1]["content"] == "Medizincheck bestanden"


def test_flatten_tolerates_missing_timeline():
    assert flatten_timeline({}) == []
    assert flatten_timeline(None) == []


@pytest.fixture
def timelines(memory_store):
    memory_store.data.update(
        {
            "timelines": [{"id": 1, "cluster_id": "c2", "timeline_data": FLAT_TIMELINE}],
            "timelines_int": [
                {"id": 5, "cluster_id": "c2", "language_code": "de", "timeline_data": json.dumps(GROUPED_TIMELINE)},
            ],
        }
    )
    return memory_store


@pytest.mark.asyncio
async def test_timeline_in_requested_language(client, timelines):
    response = await client.get("/timeline_by_cluster_id", params={"cluster_id": "c2", "language_code": "de"})

    assert response.status_code == 200
    body = response.json()
    assert body["cluster_id"] == "c2"
    assert body["language_code"] == "de"
    assert body["table_source"] == "timelines_int"
    assert body["total_entries"] == 2
    assert body["timeline_entries"][0]["headline"] == "Einigung"
    assert body["retrieved_at"].endswith("Z")


@pytest.mark.asyncio
async def test_timeline_falls_back_to_base_record(client, timelines):
    body = (await client.get("/timeline_by_cluster_id", params={"cluster_id": "c2", "language_code": "fr"})).json()

    assert body["table_source"] == "timelines"
    assert body["timeline_entries"][0]["headline"] == "Deal agreed"


@pytest.mark.asyncio
async def test_timeline_in_base_language_reads_base_only(client, timelines):
    body = (await client.get("/timeline_by_cluster_id", params={"cluster_id": "c2"})).json()

    assert body["language_code"] == "en"
    assert body["table_source"] == "timelines"
    assert timelines.calls_to("timelines_int") == []


@pytest.mark.asyncio
async def test_timeline_localized_failure_degrades(client, timelines):
    timelines.fail("timelines_int")

    response = await client.get("/timeline_by_cluster_id", params={"cluster_id": "c2", "language_code": "de"})

    assert response.status_code == 200
    assert response.json()["table_source"] == "timelines"


@pytest.mark.asyncio
async def test_timeline_errors(client, timelines):
    assert (await client.get("/timeline_by_cluster_id")).status_code == 400

    missing = await client.get("/timeline_by_cluster_id", params={"cluster_id": "c404", "language_code": "de"})
    assert missing.status_code == 404
    assert missing.json() == {"error": "Timeline not found"}

    timelines.data["timelines"] = [{"id": 2, "cluster_id": "bad", "timeline_data": "{not json"}]
    broken = await client.get("/timeline_by_cluster_id", params={"cluster_id": "bad"})
    assert broken.status_code == 500
    assert broken.json() == {"error": "Invalid timeline data format"}
