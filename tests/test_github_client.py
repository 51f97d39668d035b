import pytest

from conftest import FakeResponse, FakeSession, repo_json
from devhub.libs.github_client import GitHubClient, GitHubError, GitHubNotFoundError, GitHubRateLimitError

REPOS_URL = "https://api.github.com/users/{}/repos"


def client_for(responses, token=None):
    return GitHubClient(token=token, session=FakeSession(responses))


@pytest.fixture(autouse=True)
def no_env_token(monkeypatch):
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)


def test_lists_repositories_unauthenticated():
    payload = [repo_json("alpha", topics=["react"]), repo_json("beta", fork=True)]
    client = client_for({REPOS_URL.format("octo"): FakeResponse(200, payload)})

    repos = client.list_user_repositories("octo")

    assert [r.name for r in repos] == ["alpha", "beta"]
    assert repos[0].topics == ["react"]
    assert repos[1].fork is True
    request = client.session.requests[0]
    assert "Authorization" not in request["headers"]
    assert request["params"] == {"sort": "updated", "per_page": 30, "page": 1}


def test_token_is_sent_when_configured():
    client = client_for({REPOS_URL.format("octo"): FakeResponse(200, [])}, token="ghp_x")
    client.list_user_repositories("octo")
    assert client.session.requests[0]["headers"]["Authorization"] == "Bearer ghp_x"


def test_unknown_account_raises_not_found():
    client = client_for({REPOS_URL.format("ghost"): FakeResponse(404, {"message": "Not Found"})})
    with pytest.raises(GitHubNotFoundError) as exc:
        client.list_user_repositories("ghost")
    assert exc.value.status_code == 404
    assert "ghost" in exc.value.message


def test_exhausted_quota_raises_rate_limit():
    response = FakeResponse(
        403,
        {"message": "API rate limit exceeded"},
        headers={"x-ratelimit-remaining": "0", "x-ratelimit-reset": "1700000000"},
    )
    client = client_for({REPOS_URL.format("octo"): response})
    with pytest.raises(GitHubRateLimitError) as exc:
        client.list_user_repositories("octo")
    assert exc.value.reset == 1700000000


def test_other_failures_raise_generic_error():
    client = client_for({REPOS_URL.format("octo"): FakeResponse(500, None)})
    with pytest.raises(GitHubError) as exc:
        client.list_user_repositories("octo")
    assert not isinstance(exc.value, (GitHubNotFoundError, GitHubRateLimitError))
    assert exc.value.status_code == 500

