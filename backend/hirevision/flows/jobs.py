import logging
import re

from pydantic import BaseModel

from hirevision.config import settings
from hirevision.flows.base import FlowResult, run_structured_flow, run_text_flow

logger = logging.getLogger(__name__)

DEFAULT_INTERVIEW_QUESTIONS = [
    "Tell me about your experience with this role.",
    "What are your key strengths?",
    "Describe a challenging project you worked on.",
    "How do you handle tight deadlines?",
    "Why are you interested in this position?",
]


class InterviewQuestions(BaseModel):
    questions: list[str]


class OfferNudge(BaseModel):
    suggestions: list[str]
    summary: str


async def improve_job_description(job_description: str) -> FlowResult:
    prompt = f"""You are an expert recruitment consultant and an AI-powered job description optimizer.
Your task is to take a given job description and significantly improve it for the following criteria:
1. **Clarity and Conciseness:** Remove jargon, simplify complex sentences, and ensure every point is easy to understand.
2. **Attractiveness to Top Talent:** Highlight unique selling points of the role and company, focus on impact, growth opportunities, and a positive work environment.
3. **Keyword Optimization:** Integrate relevant keywords that recruiters and job seekers might use in searches (without keyword stuffing).
4. **Inclusivity and Bias Reduction:** Ensure the language is gender-neutral, avoids implicit bias, and appeals to a diverse range of candidates.
5. **Structure and Readability:** Organize the description with clear headings ("About the Role", "What You'll Do", "What You'll Bring", "Why Join Us"), bullet points, and appropriate formatting.

Please provide the improved job description as a well-formatted Markdown string.

Original Job Description:
```
{job_description}
```

Improved Job Description (in Markdown):"""
    return await run_text_flow("improved_job_description", prompt)


async def suggest_interview_questions(job_title: str, job_description: str) -> FlowResult:
    prompt = f"""You are an expert hiring manager. Based on the following job title and description, please generate a list of 5-7 insightful interview questions to ask a candidate. Focus on a mix of behavioral, technical, and situational questions.

Job Title: {job_title}
Job Description:
---
{job_description}
---

Return ONLY valid JSON with this structure:
{{
  "questions": ["question 1", "question 2", ...]
}}"""
    return await run_structured_flow(
        "interview_questions",
        prompt,
        InterviewQuestions,
        {"questions": list(DEFAULT_INTERVIEW_QUESTIONS)},
    )


async def score_job_match(
    candidate_skills: list[str],
    years_of_experience: int | None,
    job_title: str,
    job_skills: list[str],
    experience_required: str | None,
) -> int | None:
    """Return a 0-100 match score, or None when the model gave no number."""
    prompt = f"""Rate the match between this candidate and job from 0-100.

Candidate: Skills: {", ".join(candidate_skills) or "Not specified"}, Experience: {years_of_experience if years_of_experience is not None else "Not specified"} years
Job: {job_title}, Required Skills: {", ".join(job_skills) or "Not specified"}, Experience: {experience_required or "Not specified"}

Return ONLY a number between 0-100, nothing else."""
    result = await run_text_flow("job_match_score", prompt, fallback="", model=settings.gemini_flash_model)
    match = re.search(r"\d+", result.output)
    if not match:
        if not result.fallback:
            logger.warning("Job match score reply had no number: %r", result.output[:80])
        return None
    return max(0, min(100, int(match.group())))


async def offer_nudge(job_details: str, candidate_profile: str) -> FlowResult:
    prompt = f"""You are an expert HR and recruitment consultant. Your goal is to provide actionable suggestions (nudges) to make a job offer more attractive and competitive for a specific candidate, based on the job details and the candidate's profile.

Job Details:
```
{job_details}
```

Candidate Profile (including expectations, skills, experience):
```
{candidate_profile}
```

Based on this information, generate concrete, actionable suggestions that could improve the offer for this candidate. Consider aspects like salary, benefits, career growth, work-life balance, company culture, learning opportunities, etc.

Provide your response in JSON format with the following structure:
{{
  "suggestions": ["Suggestion 1", "Suggestion 2", ...],
  "summary": "A brief overall summary of the main points of your suggestions."
}}"""
    return await run_structured_flow(
        "offer_nudge",
        prompt,
        OfferNudge,
        {
            "suggestions": [],
            "summary": "Offer suggestions are unavailable right now. Review compensation and growth opportunities against the candidate's expectations.",
        },
    )
