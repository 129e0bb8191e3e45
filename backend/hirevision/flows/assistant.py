from typing import Any

from pydantic import BaseModel

from hirevision.flows.base import FlowResult, run_structured_flow, run_text_flow

ONBOARDING_DEFAULTS = {
    "candidate": {
        "welcome_message": "Welcome to the platform!",
        "suggested_actions": ["Complete your profile.", "Browse jobs."],
        "encouragement": "We're here to help you succeed!",
    },
    "recruiter": {
        "welcome_message": "Welcome to the platform!",
        "suggested_actions": ["Post a job.", "Review candidates."],
        "encouragement": "Find your next great hire!",
    },
}

DEFAULT_MESSAGE_SUGGESTIONS = [
    "Thanks for your message! I'll get back to you shortly.",
    "Could you share a bit more detail?",
    "That sounds great, let's schedule a time to talk.",
]


class OnboardingSuggestions(BaseModel):
    welcome_message: str
    suggested_actions: list[str]
    encouragement: str


class MessageSuggestions(BaseModel):
    suggestions: list[str]


class DataQueryAnswer(BaseModel):
    summary: str
    mock_data: list[Any]


class CodeAnalysis(BaseModel):
    analysis_summary: str
    suggestions: list[str]
    potential_issues: list[str]
    refactored_code: str | None = None


async def onboarding_suggestions(user_role: str) -> FlowResult:
    prompt = f"""You are a helpful onboarding assistant for a career platform.
Generate a personalized welcome message, 2-3 key initial actions, and a brief encouraging statement for a new user with the role of "{user_role}".

Output your response as a JSON object with the following fields:
- "welcome_message": string
- "suggested_actions": string[] (an array of 2-3 actions)
- "encouragement": string

Here's an example for a 'candidate':
{{
  "welcome_message": "Welcome, Future Talent!",
  "suggested_actions": [
    "Complete your profile to unlock personalized job recommendations.",
    "Explore our challenges to showcase your skills.",
    "Practice with our AI interview coach."
  ],
  "encouragement": "Your next big opportunity awaits. Let's find it together!"
}}

Here's an example for a 'recruiter':
{{
  "welcome_message": "Welcome, Talent Scout!",
  "suggested_actions": [
    "Post your first job listing to attract top candidates.",
    "Utilize our AI candidate matching feature to find the best fit.",
    "Set up your hiring pipeline for seamless management."
  ],
  "encouragement": "Empower your team with the best talent. Happy hiring!"
}}

Now, generate the JSON for the "{user_role}" role:"""
    default = ONBOARDING_DEFAULTS[user_role]
    return await run_structured_flow(
        "onboarding_suggestions",
        prompt,
        OnboardingSuggestions,
        {**default, "suggested_actions": list(default["suggested_actions"])},
    )


async def message_suggestions(conversation_history: list[dict], latest_message: str) -> FlowResult:
    history = "\n".join(f"{m['role']}: {m['content']}" for m in conversation_history)
    prompt = f"""You are a helpful communication assistant. Analyze the following conversation history and the latest message, then provide 2-3 concise, professional, and contextually relevant reply suggestions. Focus on moving the conversation forward, offering clarity, or expressing interest. The suggestions should be short and direct.

Conversation History:
{history}

Latest Message:
user: {latest_message}

Based on this, suggest 2-3 appropriate replies. Return the suggestions as JSON, like this:
{{ "suggestions": ["Suggestion 1", "Suggestion 2", "Suggestion 3"] }}"""
    return await run_structured_flow(
        "message_suggestions",
        prompt,
        MessageSuggestions,
        {"suggestions": list(DEFAULT_MESSAGE_SUGGESTIONS)},
    )


async def generate_report(report_context: str, report_type: str) -> FlowResult:
    prompt = f"""You are an expert business analyst, specializing in recruitment and startup operations.
Your task is to analyze the provided report context and generate a comprehensive, actionable report or summary.
The report should include key findings, identified trends, potential risks, and clear recommendations.
Format the output as a Markdown string suitable for display, with clear headings and bullet points.

Report Type: {report_type}
Report Context: {report_context}

Please provide the report in Markdown format."""
    return await run_text_flow("report", prompt)


async def smart_data_query(natural_language_query: str) -> FlowResult:
    prompt = f"""You are a Data Analyst AI for a talent acquisition platform. Your task is to process a natural language query, simulate data retrieval, and then summarize that mock data.

The user's query is: "{natural_language_query}"

First, interpret the query and imagine what kind of data (candidate profiles, job applications, interview results, company stats) would be relevant.
Second, simulate fetching this data by generating a realistic, small JSON array of mock data that directly relates to the query.
Third, provide a natural language summary of the mock data you just generated, answering the original query based on it.

Your final output MUST be a JSON object with two fields:
- "summary": A natural language summary of the mock data, answering the user's query.
- "mock_data": A JSON array representing the simulated data retrieval results.

Ensure mock_data is always a JSON array, even if it's empty."""

    def raw_text_as_summary(raw: str | None) -> dict:
        return {
            "summary": raw.strip() if raw and raw.strip() else "No results could be generated for this query.",
            "mock_data": [],
        }

    return await run_structured_flow("smart_data_query", prompt, DataQueryAnswer, raw_text_as_summary)


async def code_analysis(code_snippet: str, language: str) -> FlowResult:
    prompt = f"""You are an expert code reviewer and assistant. Analyze the provided {language} code snippet.
Provide constructive feedback focusing on potential bugs, areas for improvement (efficiency, readability, best practices), and alternative approaches.

Format your response as a JSON object with the following fields:
- "analysis_summary": A brief overview of the code's quality (string).
- "suggestions": Detailed suggestions for improvement (array of strings).
- "potential_issues": Identified problems such as bugs, security vulnerabilities or performance bottlenecks (array of strings).
- "refactored_code": (Optional) A slightly improved version of the code snippet (string).

Here is the {language} code snippet:
```{language}
{code_snippet}
```"""
    return await run_structured_flow(
        "code_analysis",
        prompt,
        CodeAnalysis,
        {
            "analysis_summary": "Code analysis is unavailable right now.",
            "suggestions": [],
            "potential_issues": [],
            "refactored_code": None,
        },
    )
