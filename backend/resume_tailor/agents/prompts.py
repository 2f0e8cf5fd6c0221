"""
Prompt templates for the three agent stages.

A template is compiled once into the list of ``{identifier}`` tokens it
contains. Rendering is a single regex pass, so text inside a substituted value
is never substituted again. Brace groups that are not bare identifiers (the
schema hints in the Extractor prompt, for example) are plain text.
"""
import json
import re
from typing import Mapping, Tuple

from ..errors import PromptTemplateError
from ..schemas import ResumeDocument

_TOKEN_RX = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")


class PromptTemplate:
    def __init__(self, name: str, text: str):
        self.name = name
        self.text = text
        self.placeholders: Tuple[str, ...] = tuple(dict.fromkeys(_TOKEN_RX.findall(text)))

    def render(self, values: Mapping[str, str], strict: bool = False) -> str:
        """Replace every occurrence of each token with its value.

        Non-strict rendering leaves tokens with no value untouched. Strict
        rendering raises on tokens with no value and on values that match no
        token.
        """
        if strict:
            missing = [p for p in self.placeholders if p not in values]
            unknown = [k for k in values if k not in self.placeholders]
            if missing or unknown:
                raise PromptTemplateError(
                    f"{self.name} template binding failed "
                    f"(missing: {', '.join(missing) or '-'}; unknown: {', '.join(unknown) or '-'})"
                )

        def _sub(match: "re.Match[str]") -> str:
            key = match.group(1)
            if key in values:
                return str(values[key])
            return match.group(0)

        return _TOKEN_RX.sub(_sub, self.text)

    def __repr__(self) -> str:
        return f"PromptTemplate({self.name!r}, placeholders={list(self.placeholders)})"


EXTRACTOR_TEMPLATE = PromptTemplate("extractor", """
You are an expert AI data extractor. Your task is to analyze the raw text of a resume and convert it into a structured JSON object.
The JSON object must follow this exact schema: {name, email, phone, linkedin, summary, skills (array of strings), experience (array of objects with company, role, period, description (array of strings)), education (object with degree, university, period)}.
Use an empty string for any field that is not present in the resume and an empty array for missing lists.
Keep the experience entries in the same order as the resume.
Raw Resume Text:
```
{rawResumeText}
```
Output ONLY the JSON object.
""")

PLANNER_TEMPLATE = PromptTemplate("planner", """
You are an AI career strategist (Planner Agent). Analyze the user's structured resume and a job description to create a strategic tailoring plan.
User's Resume JSON:
```json
{resumeData}
```
Job Description:
```text
{jobDescription}
```
Generate a JSON object with a strategic plan containing three keys:
1. "extractedSkills": An array of the top 5-7 critical skills from the job description.
2. "skillGap": An array of key skills from the job description missing from the user's resume.
3. "rewritePlan": A concise, high-level action plan for the Executor Agent to rewrite the summary and work experience.
Output strictly in JSON format.
""")

EXECUTOR_TEMPLATE = PromptTemplate("executor", """
You are an AI resume writer (Executor Agent). Rewrite a user's resume based on the provided strategic plan.
User's Original Resume JSON:
```json
{resumeData}
```
Strategic Plan from Planner Agent:
```text
{rewritePlan}
```
Your Task: Rewrite the "summary" and "experience" sections.
- Follow the plan exactly.
- Incorporate relevant skills naturally.
- Do NOT invent new experiences. Only rephrase existing details.
- Keep exactly one entry per original experience entry, in the original order, with the same company and period.
- Return ONLY a JSON object with two keys: "tailoredSummary" and "tailoredExperience". The "tailoredExperience" should be an array of objects, maintaining the original structure (company, role, period, description).
Output strictly in JSON format.
""")

TEMPLATES = {t.name: t for t in (EXTRACTOR_TEMPLATE, PLANNER_TEMPLATE, EXECUTOR_TEMPLATE)}


def serialize_resume(resume: ResumeDocument) -> str:
    return json.dumps(resume.model_dump(), indent=2, ensure_ascii=False)


def build_extractor_prompt(raw_resume_text: str) -> str:
    return EXTRACTOR_TEMPLATE.render({"rawResumeText": raw_resume_text}, strict=True)


def build_planner_prompt(resume: ResumeDocument, job_description: str) -> str:
    return PLANNER_TEMPLATE.render(
        {"resumeData": serialize_resume(resume), "jobDescription": job_description},
        strict=True,
    )


def build_executor_prompt(resume: ResumeDocument, rewrite_plan: str) -> str:
    if not rewrite_plan or not rewrite_plan.strip():
        raise PromptTemplateError("executor template requires a non-empty rewrite plan")
    return EXECUTOR_TEMPLATE.render(
        {"resumeData": serialize_resume(resume), "rewritePlan": rewrite_plan},
        strict=True,
    )
