import json

import pytest

from resume_tailor.agents.coercion import coerce_json, coerce_model, strip_fences
from resume_tailor.errors import ExternalServiceError, ParseError
from resume_tailor.schemas import ResumeDocument, StrategicPlan, TailoredSections


def test_fenced_json_is_parsed():
    assert coerce_json('```json\n{"a":1}\n```') == {"a": 1}


def test_plain_text_raises_parse_error():
    with pytest.raises(ParseError):
        coerce_json("not json at all")


def test_fences_in_the_middle_of_the_text_are_removed():
    raw = '\n\n  ```json\n{"skills": ["Python", "Go"]}\n```  \n\n'
    assert coerce_json(raw) == {"skills": ["Python", "Go"]}


def test_uppercase_tag_and_bare_fences():
    assert coerce_json('```JSON\n[1, 2]\n```') == [1, 2]
    assert coerce_json('```\n{"ok": true}\n```') == {"ok": True}


def test_strip_fences_removes_every_marker():
    assert strip_fences('```json{"a":```1```}```') == '{"a":1}'


def test_trailing_prose_is_rejected():
    with pytest.raises(ParseError):
        coerce_json('```json\n{"a": 1}\n```\nLet me know if you need anything else!')


def test_truncated_output_is_rejected():
    with pytest.raises(ParseError) as exc:
        coerce_json('{"summary": "Built things", "skills": ["Py')
    assert "not valid JSON" in exc.value.message
    assert exc.value.raw_excerpt.startswith('{"summary"')


@pytest.mark.parametrize("raw", ["", "   ", "```json\n```", None])
def test_empty_responses_are_parse_errors(raw):
    with pytest.raises(ParseError):
        coerce_json(raw)


def test_valid_empty_values_are_not_errors():
    assert coerce_json("null") is None
    assert coerce_json("[]") == []
    assert coerce_json("```json\n{}\n```") == {}


def test_parse_error_is_distinct_from_transport_errors():
    assert not issubclass(ParseError, ExternalServiceError)


def test_coerce_model_requires_an_object():
    with pytest.raises(ParseError) as exc:
        coerce_model('["Python"]', ResumeDocument)
    assert "ResumeDocument" in exc.value.message


def test_coerce_model_normalises_resume(resume_data):
    resume_data["experience"][0]["description"] = None
    resume_data["skills"] = ["Python", "", None, "Python", "  Go "]
    resume_data["phone"] = None
    resume_data["unexpected"] = "ignored"

    resume = coerce_model(json.dumps(resume_data), ResumeDocument)

    assert resume.experience[0].description == []
    assert resume.skills == ["Python", "Python", "Go"]
    assert resume.phone == ""
    assert resume.education.university == "IIT Bhubaneswar"


def test_plan_without_rewrite_plan_is_rejected():
    with pytest.raises(ParseError) as exc:
        coerce_model('{"extractedSkills": ["Python"], "skillGap": []}', StrategicPlan)
    assert "rewritePlan" in exc.value.message


def test_plan_with_blank_rewrite_plan_is_rejected():
    with pytest.raises(ParseError):
        coerce_model('{"extractedSkills": [], "skillGap": [], "rewritePlan": "   "}', StrategicPlan)


def test_plan_steps_list_is_joined():
    plan = coerce_model('{"rewritePlan": ["Lead with Python", "Mention Git"]}', StrategicPlan)
    assert plan.rewritePlan == "Lead with Python\nMention Git"
    assert plan.extractedSkills == [] and plan.skillGap == []


def test_sections_require_both_keys():
    with pytest.raises(ParseError):
        coerce_model('{"tailoredSummary": "Hi"}', TailoredSections)
