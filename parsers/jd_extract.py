import json
import logging
import re
from urllib.parse import urlparse

from matching.llm_anthropic import NonTextResponse, complete
from matching.prompts import EXTRACT_PROMPT

logger = logging.getLogger(__name__)

MAX_PAGE_CHARS = 50000
MAX_TOKENS = 2000

KNOWN_SITES = ("linkedin", "indeed", "glassdoor", "dice", "ziprecruiter", "monster")

SCAN_FIELDS = (
    "title", "companyName", "description", "requirements", "responsibilities",
    "location", "locationType", "salaryMin", "salaryMax", "salaryCurrency",
    "salaryPeriod", "employmentType", "experienceLevel",
)


def detect_source_site(url: str) -> str:
    host = (urlparse(url).hostname or "").lower()
    for site in KNOWN_SITES:
        if site in host:
            return site
    if host.startswith("www."):
        host = host[4:]
    return host.split(".")[0] or "other"


def extract_job_posting(page_content: str, page_url: str, page_title: str = "") -> dict:
    """
    Turn raw page text captured by the extension into a job-scan payload.
    Returns {"isJobPage": False, "error": ...} when the page is not a posting
    or the model's answer carries no usable JSON.
    """
    prompt = EXTRACT_PROMPT.format(
        url=page_url,
        page_title=page_title or "",
        content=page_content[:MAX_PAGE_CHARS],
    )
    try:
        response_text = complete(prompt, max_tokens=MAX_TOKENS)
    except NonTextResponse as e:
        logger.warning("Extraction answer carried no text: %s", e)
        response_text = ""

    # The answer may be wrapped in prose or fences; take the outermost object.
    match = re.search(r"\{[\s\S]*\}", response_text)
    try:
        if not match:
            raise ValueError("No JSON found in response")
        extracted = json.loads(match.group(0))
        if not isinstance(extracted, dict):
            raise ValueError("Extracted JSON is not an object")
    except ValueError as e:
        logger.warning("Failed to parse extraction response (%s): %s", e, response_text)
        return {"isJobPage": False, "error": "Failed to parse job data"}

    if not extracted.get("isJobPage"):
        return {"isJobPage": False, "error": "This does not appear to be a job posting page"}

    data = {k: extracted.get(k) for k in SCAN_FIELDS}
    data["description"] = data["description"] or ""
    data["sourceUrl"] = page_url
    data["sourceSite"] = detect_source_site(page_url)
    logger.info("Extracted job %r from %s", data["title"], data["sourceSite"])
    return {"isJobPage": True, "data": data}
