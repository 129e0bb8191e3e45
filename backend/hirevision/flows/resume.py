"""Resume, candidate ranking and skill flows."""
from pydantic import BaseModel, field_validator

from hirevision.flows.base import FlowResult, run_structured_flow


def _clamp_score(value) -> int:
    return max(0, min(100, round(float(value))))


class SkillExperience(BaseModel):
    skill: str
    years: float


class Education(BaseModel):
    institution: str
    degree: str
    year: int | None = None


class WorkHistoryEntry(BaseModel):
    company: str
    position: str
    duration: str


class ResumeAnalysis(BaseModel):
    skills: list[str]
    experience: list[SkillExperience]
    education: list[Education]
    work_history: list[WorkHistoryEntry]


class CandidateRanking(BaseModel):
    fit_score: int
    reasoning: str

    @field_validator("fit_score", mode="before")
    @classmethod
    def clamp(cls, v):
        return _clamp_score(v)


class SourcedCandidate(BaseModel):
    name: str
    profile_url: str
    summary: str
    location: str | None = None


class SourcedCandidates(BaseModel):
    candidates: list[SourcedCandidate]


class SkillMatch(BaseModel):
    matched_skills: list[str]
    missing_skills: list[str]
    additional_candidate_skills: list[str]
    compatibility_score: int
    summary_feedback: str

    @field_validator("compatibility_score", mode="before")
    @classmethod
    def clamp(cls, v):
        return _clamp_score(v)


class LearningStep(BaseModel):
    step: int
    skill: str
    duration: str
    resources: list[str] = []


class SkillGapAnalysis(BaseModel):
    required_skills: list[str]
    current_skills: list[str]
    missing_skills: list[str]
    estimated_time: str
    difficulty: str
    learning_path: list[LearningStep]
    project_suggestions: list[str]


RANKING_FALLBACK = {
    "fit_score": 50,
    "reasoning": "Unable to analyze candidate fit at this time.",
}


async def analyze_resume(resume_text: str) -> FlowResult:
    prompt = f"""Analyze the following resume text and extract a structured analysis.
Infer the years of experience for each skill based on the work history dates.

Resume:
{resume_text}

Return ONLY valid JSON with this structure:
{{
  "skills": ["skill", ...],
  "experience": [{{"skill": "string", "years": number}}],
  "education": [{{"institution": "string", "degree": "string", "year": number or null}}],
  "work_history": [{{"company": "string", "position": "string", "duration": "string"}}]
}}"""
    return await run_structured_flow(
        "resume_analysis",
        prompt,
        ResumeAnalysis,
        {"skills": [], "experience": [], "education": [], "work_history": []},
    )


async def rank_candidate(job_description: str, candidate_resume: str) -> FlowResult:
    prompt = f"""You are an expert AI recruiter. Your task is to score a candidate based on their resume against a specific job description.
Provide a fit score from 0 to 100, where 100 is a perfect match.
Also provide a concise, one-paragraph reasoning for your score, highlighting the key matching skills and experience, as well as any potential gaps.

Job Description:
---
{job_description}
---

Candidate's Resume:
---
{candidate_resume}
---

Return ONLY valid JSON with this structure:
{{
  "fit_score": number (0-100),
  "reasoning": "string"
}}"""
    return await run_structured_flow("candidate_ranking", prompt, CandidateRanking, dict(RANKING_FALLBACK))


async def source_candidates(job_description: str) -> FlowResult:
    prompt = f"""You are an expert technical recruiter with access to a vast network of professional profiles. Your task is to find the best possible candidates for the following job description.

Job Description:
{job_description}

Provide a list of 3-5 potential candidates who appear to be a strong match.
For each candidate, return their full name, a URL to their professional profile, a brief summary of their relevant skills and experience, and their location if available.

Return ONLY valid JSON with this structure:
{{
  "candidates": [
    {{"name": "string", "profile_url": "string", "summary": "string", "location": "string or null"}}
  ]
}}"""
    return await run_structured_flow("candidate_sourcing", prompt, SourcedCandidates, {"candidates": []})


async def match_skills(candidate_text: str, job_description: str) -> FlowResult:
    prompt = f'''You are an expert HR analyst. Your task is to analyze a candidate's skills from their text and compare them against the required skills for a job description.

Candidate's Text:
"""
{candidate_text}
"""

Job Description:
"""
{job_description}
"""

Provide your analysis in a structured JSON format with the following fields:
1. "matched_skills": skills explicitly found in both the candidate's text and the job description.
2. "missing_skills": key skills required by the job description that are not clearly present in the candidate's text.
3. "additional_candidate_skills": notable skills in the candidate's text that the job description does not require.
4. "compatibility_score": an integer 0-100 giving a holistic assessment of the fit.
5. "summary_feedback": a brief, professional summary (2-3 sentences) of the skill match.

Ensure the output is valid JSON and nothing else.'''
    return await run_structured_flow(
        "skill_matching",
        prompt,
        SkillMatch,
        {
            "matched_skills": [],
            "missing_skills": [],
            "additional_candidate_skills": [],
            "compatibility_score": 0,
            "summary_feedback": "Skill matching is unavailable right now. Please try again later.",
        },
    )


async def analyze_skill_gap(target_role: str, current_skills: list[str], experience: str | None = None) -> FlowResult:
    skills = ", ".join(current_skills) if current_skills else "None listed"
    prompt = f"""You are a career development advisor. A professional wants to move into the role of "{target_role}".

Current skills: {skills}
Experience: {experience or "Not specified"}

Identify the skills the target role requires, which of them are missing, and build a step-by-step learning path with realistic durations and learning resources. Suggest practical projects that would demonstrate the missing skills, estimate the total time needed and rate the difficulty of the transition (Easy, Medium or Hard).

Return ONLY valid JSON with this structure:
{{
  "required_skills": ["string"],
  "current_skills": ["string"],
  "missing_skills": ["string"],
  "estimated_time": "string",
  "difficulty": "string",
  "learning_path": [{{"step": 1, "skill": "string", "duration": "string", "resources": ["string"]}}],
  "project_suggestions": ["string"]
}}"""
    return await run_structured_flow(
        "skill_gap_analysis",
        prompt,
        SkillGapAnalysis,
        {
            "required_skills": [],
            "current_skills": list(current_skills),
            "missing_skills": [],
            "estimated_time": "Unknown",
            "difficulty": "Unknown",
            "learning_path": [],
            "project_suggestions": [],
        },
    )
