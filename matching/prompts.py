MATCH_PROMPT = """You are a professional job matching analyst. Analyze how well the candidate's resume matches the job posting.

RESUME:
{resume}

JOB TITLE: {title}

JOB DESCRIPTION:
{description}
{requirements_section}
Analyze the match and return a JSON object with these fields:
- overallScore: number from 0-100 representing match percentage
- matchingSkills: array of skills that appear in both resume and job
- missingSkills: array of required skills not found in resume
- experienceGap: brief description of experience gaps
- recommendations: array of 2-3 suggestions to improve the match

Return ONLY valid JSON, no other text."""


REQUIREMENTS_SECTION = """
JOB REQUIREMENTS:
{requirements}
"""


BULLETS_PROMPT = """You are an expert cover letter writer. Generate 5 powerful bullet points for a cover letter based on the resume and job posting.

CANDIDATE'S RESUME:
{resume}

JOB TITLE: {title}
COMPANY: {company}

JOB DESCRIPTION:
{description}

Generate exactly 5 bullet points using this format:
- Start with a strong action verb (gerund form: -ing)
- Focus on a specific skill or activity relevant to the job
- Include context or purpose

Example format:
- "Translating complex financial data and regulations into simple, accessible user experiences."
- "Designing secure payment flows that balance fraud prevention with user convenience."
- "Building scalable design systems that maintain consistency across mobile, web, and physical touchpoints."

Match each bullet to a specific job requirement. Return ONLY a JSON array with objects containing:
- text: the bullet point text
- relevance: number 0-100 indicating how relevant it is to the job
- targetRequirement: the job requirement this bullet addresses

Return ONLY valid JSON array, no other text."""


EXTRACT_PROMPT = """Extract job posting information from the following webpage content. If this is not a job posting page, respond with {{"isJobPage": false}}.

If it IS a job posting, extract the following information and respond with a JSON object:

{{
  "isJobPage": true,
  "title": "Job title",
  "companyName": "Company name",
  "description": "Full job description text",
  "requirements": "Job requirements/qualifications (if separate from description)",
  "responsibilities": "Job responsibilities (if separate from description)",
  "location": "Job location",
  "locationType": "REMOTE" | "ONSITE" | "HYBRID" | null,
  "salaryMin": number or null,
  "salaryMax": number or null,
  "salaryCurrency": "USD" | "EUR" | etc or null,
  "salaryPeriod": "HOURLY" | "DAILY" | "WEEKLY" | "MONTHLY" | "YEARLY" | null,
  "employmentType": "FULL_TIME" | "PART_TIME" | "CONTRACT" | "INTERNSHIP" | "TEMPORARY" | null,
  "experienceLevel": "ENTRY" | "MID" | "SENIOR" | "LEAD" | "EXECUTIVE" | null
}}

Page URL: {url}
Page Title: {page_title}

Page Content:
{content}

Respond ONLY with the JSON object, no other text."""
