import pytest


@pytest.fixture
def articles(memory_store):
    memory_store.data.update(
        {
            "Teams": [{"id": 1, "teamId": "DAL"}, {"id": 2, "teamId": "NYJ"}],
            "NewsSource": [{"id": 100, "Name": "ESPN"}],
            "SourceArticles": [
                {"id": 10, "created_at": "2024-01-01T10:00:00Z", "url": "https://example.com/10", "source": 100},
                {"id": 11, "created_at": "2024-01-02T10:00:00Z", "url": "https://example.com/11", "source": 100},
            ],
            "NewsArticles": [
                {
                    "id": n,
                    "headlineEnglish": f"Headline {n}",
                    "headlineGerman": f"Schlagzeile {n}",
                    "ContentEnglish": f"Body {n}",
                    "ContentGerman": f"Text {n}",
                    "Image1": f"https://img.example.com/{n}.jpg",
                    "Image2": None,
                    "Image3": None,
                    "status": "ARCHIVED" if n == 4 else "PUBLISHED",
                    "UpdatedBy": None,
                    "isUpdate": False,
                    "team": 2 if n % 2 == 0 else 1,
                    "SourceArticle": 10 if n < 3 else 11,
                }
                for n in range(1, 6)
            ],
        }
    )
    return memory_store


@pytest.mark.asyncio
async def test_previews_page_newest_first_without_archived(client, articles):
    first = await client.get("/articlePreviews", params={"limit": 2})
    assert first.status_code == 200
    body = first.json()
    assert [item["id"] for item in body["data"]] == [5, 3]
    assert body["nextCursor"] == "3"
    assert body["data"][0]["teamId"] == "DAL"
    assert body["data"][0]["createdAt"] == "2024-01-02T10:00:00Z"
    assert "source" not in body["data"][0]

    second = (await client.get("/articlePreviews", params={"limit": 2, "cursor": "3"})).json()
    assert [item["id"] for item in second["data"]] == [2, 1]
    assert second["nextCursor"] == "1"

    last = (await client.get("/articlePreviews", params={"limit": 2, "cursor": "1"})).json()
    assert last == {"data": [], "nextCursor": None}


@pytest.mark.asyncio
async def test_previews_resolve_references_in_one_read_each(client, articles):
    response = await client.get("/articlePreviews")

    assert response.status_code == 200
    assert len(articles.calls_to("Teams")) == 1
    assert len(articles.calls_to("SourceArticles")) == 1
    assert len(articles.calls_to("NewsSource")) == 1


@pytest.mark.asyncio
async def test_previews_filter_by_team_abbreviation(client, articles):
    body = (await client.get("/articlePreviews", params={"teamId": "NYJ"})).json()

    assert [item["id"] for item in body["data"]] == [2]
    assert body["nextCursor"] is None


@pytest.mark.asyncio
async def test_previews_unknown_team_is_not_found(client, articles):
    response = await client.get("/articlePreviews", params={"teamId": "XYZ"})

    assert response.status_code == 404
    assert response.json() == {"error": "Team not found: XYZ"}


@pytest.mark.asyncio
async def test_previews_reject_a_non_numeric_cursor(client, articles):
    response = await client.get("/articlePreviews", params={"cursor": "not-a-number"})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid cursor parameter"}


@pytest.mark.asyncio
async def test_previews_reject_a_cursor_beyond_bigint(client, articles):
    response = await client.get("/articlePreviews", params={"cursor": "99999999999999999999999"})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid cursor parameter"}
    assert articles.calls_to("NewsArticles") == []


@pytest.mark.asyncio
async def test_previews_limit_validation(client, articles):
    assert (await client.get("/articlePreviews", params={"limit": 0})).status_code == 400

    response = await client.get("/articlePreviews", params={"limit": "abc"})
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid limit parameter"}

    clamped = (await client.get("/articlePreviews", params={"limit": 1000})).json()
    assert len(clamped["data"]) == 4
    assert articles.calls_to("NewsArticles")[-1].limit == 100


@pytest.mark.asyncio
async def test_previews_survive_a_failed_team_lookup(client, articles):
    articles.fail("Teams")

    response = await client.get("/articlePreviews")

    assert response.status_code == 200
    assert [item["teamId"] for item in response.json()["data"]] == [None, None, None, None]


@pytest.mark.asyncio
async def test_previews_primary_failure_is_generic_500(client, articles):
    articles.fail("NewsArticles", RuntimeError("connection to 10.0.0.5 refused"))

    response = await client.get("/articlePreviews")

    assert response.status_code == 500
    assert response.json() == {"error": "Server error processing request."}


@pytest.mark.asyncio
async def test_article_detail(client, articles):
    response = await client.get("/articleDetail", params={"id": 1})

    assert response.status_code == 200
    body = response.json()
    assert body["englishHeadline"] == "Headline 1"
    assert body["ContentGerman"] == "Text 1"
    assert body["sourceUrl"] == "https://example.com/10"
    assert body["SourceName"] == "ESPN"
    assert body["teamId"] == "DAL"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "params, status_code, message",
    [
        ({}, 400, "Missing required parameter: id"),
        ({"id": "abc"}, 400, "Invalid parameter: id must be a number"),
        ({"id": 99}, 404, "Article not found or not accessible"),
    ],
)
async def test_article_detail_errors(client, articles, params, status_code, message):
    response = await client.get("/articleDetail", params=params)

    assert response.status_code == status_code
    assert response.json() == {"error": message}


@pytest.mark.asyncio
async def test_related_articles_follow_vector_ranking(client, memory_store):
    memory_store.data.update(
        {
            "ArticleVector": [{"SourceArticle": 10, "related": [12, 11, 13, 14, 15, 16]}],
            "NewsArticles": [
                {"id": 1, "SourceArticle": 11, "headlineEnglish": "Eleven", "headlineGerman": "Elf"},
                {"id": 2, "SourceArticle": 12, "headlineEnglish": "Twelve", "headlineGerman": "Zwoelf"},
                {"id": 3, "SourceArticle": 16, "headlineEnglish": "Sixteen", "headlineGerman": "Sechzehn"},
            ],
        }
    )

    response = await client.post("/relatedArticles", json={"sourceArticleId": 10})

    assert response.status_code == 200
    assert response.json() == {
        "data": [
            {"SourceArticle": 12, "headlineGerman": "Zwoelf", "headlineEnglish": "Twelve"},
            {"SourceArticle": 11, "headlineGerman": "Elf", "headlineEnglish": "Eleven"},
        ]
    }
    assert memory_store.calls_to("NewsArticles")[0].where.values == (12, 11, 13, 14, 15)


@pytest.mark.asyncio
async def test_related_articles_errors(client, memory_store):
    memory_store.data["ArticleVector"] = [{"SourceArticle": 10, "related": []}]

    assert (await client.post("/relatedArticles", json={})).status_code == 400
    assert (await client.post("/relatedArticles", json={"sourceArticleId": 77})).status_code == 404

    empty = await client.post("/relatedArticles", json={"sourceArticleId": 10})
    assert empty.json() == {"data": []}
    assert memory_store.calls_to("NewsArticles") == []
