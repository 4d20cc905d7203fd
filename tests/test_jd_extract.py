import json

import pytest

from matching.llm_anthropic import CompletionError, NonTextResponse
from parsers.jd_extract import MAX_PAGE_CHARS, detect_source_site, extract_job_posting


@pytest.mark.parametrize(
    "url,site",
    [
        ("https://www.linkedin.com/jobs/view/123", "linkedin"),
        ("https://uk.indeed.com/viewjob?jk=1", "indeed"),
        ("https://www.glassdoor.com/job-listing/x", "glassdoor"),
        ("https://www.dice.com/job-detail/abc", "dice"),
        ("https://www.ziprecruiter.com/c/Acme/Job", "ziprecruiter"),
        ("https://jobs.monster.com/x", "monster"),
        ("https://www.workable.com/j/ABC", "workable"),
        ("https://boards.greenhouse.io/acme/jobs/1", "boards"),
    ],
)
def test_detect_source_site(url, site):
    assert detect_source_site(url) == site


def test_extracts_job_from_prose_wrapped_json(fake_llm):
    answer = {
        "isJobPage": True,
        "title": "Data Engineer",
        "companyName": "Acme",
        "description": "Build pipelines",
        "locationType": "REMOTE",
        "salaryMin": 100000,
    }
    fake_llm.responses.append(f"Here you go:\n```json\n{json.dumps(answer)}\n```")
    result = extract_job_posting("page text", "https://www.linkedin.com/jobs/view/9", "Data Engineer | Acme")

    assert result["isJobPage"] is True
    data = result["data"]
    assert data["title"] == "Data Engineer"
    assert data["companyName"] == "Acme"
    assert data["locationType"] == "REMOTE"
    assert data["salaryMin"] == 100000
    assert data["requirements"] is None
    assert data["sourceUrl"] == "https://www.linkedin.com/jobs/view/9"
    assert data["sourceSite"] == "linkedin"
    assert fake_llm.calls[0]["max_tokens"] == 2000


def test_not_a_job_page(fake_llm):
    fake_llm.responses.append('{"isJobPage": false}')
    result = extract_job_posting("cat pictures", "https://example.com/cats")
    assert result == {"isJobPage": False, "error": "This does not appear to be a job posting page"}


@pytest.mark.parametrize("answer", ["no json here", "{not: valid json}"])
def test_unparseable_answer(fake_llm, answer):
    fake_llm.responses.append(answer)
    result = extract_job_posting("page", "https://example.com/job")
    assert result == {"isJobPage": False, "error": "Failed to parse job data"}


def test_page_content_truncated(fake_llm):
    fake_llm.responses.append('{"isJobPage": false}')
    extract_job_posting("x" * (MAX_PAGE_CHARS + 500), "https://example.com/job")
    assert "x" * MAX_PAGE_CHARS in fake_llm.calls[0]["prompt"]
    assert "x" * (MAX_PAGE_CHARS + 1) not in fake_llm.calls[0]["prompt"]


def test_non_text_answer_is_a_parse_failure(fake_llm):
    fake_llm.responses.append(NonTextResponse("Unexpected response type"))
    result = extract_job_posting("page", "https://example.com/job")
    assert result == {"isJobPage": False, "error": "Failed to parse job data"}


def test_missing_api_key_still_raises(fake_llm):
    fake_llm.responses.append(CompletionError("ANTHROPIC_API_KEY missing"))
    with pytest.raises(CompletionError):
        extract_job_posting("page", "https://example.com/job")
