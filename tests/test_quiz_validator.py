"""
Tests for quiz definition validation (quiz_validator.py).
Every problem must be reported in one pass with a stable code.
"""
import copy
import json

import pytest

from schorm_runtime.quiz_validator import validate_quiz, validate_quiz_file


def _valid_quiz():
    return {
        "id": "mixed",
        "passing_score": 0.7,
        "questions": [
            {"id": "sc", "type": "single-choice", "prompt": "Pick b",
             "options": [{"id": "a"}, {"id": "b"}], "correct": "b"},
            {"id": "mr", "type": "multiple-response", "prompt": "Pick a",
             "options": [{"id": "a"}, {"id": "b"}], "correct": ["a"]},
            {"id": "tf", "type": "true-false", "prompt": "True?", "correct": True},
            {"id": "fb", "type": "fill-blank", "prompt": "Fill",
             "text": "Capital: [[city]]", "blanks": [{"id": "city", "correct_answers": ["Paris"]}]},
            {"id": "mt", "type": "matching", "prompt": "Match",
             "premises": [{"id": "p1"}], "responses": [{"id": "r1"}],
             "correct_pairs": [{"premise": "p1", "response": "r1"}]},
        ],
    }


def _with_question(index, **changes):
    data = copy.deepcopy(_valid_quiz())
    data["questions"][index].update(changes)
    return data


class TestQuizLevel:
    def test_valid_quiz(self):
        result = validate_quiz(_valid_quiz())
        assert result.ok
        assert result.errors == []
        assert result.summary() == "Quiz definition is valid."

    def test_not_a_mapping(self):
        result = validate_quiz(["nope"])
        assert result.codes() == ["MISSING_QUESTIONS"]

    def test_missing_id_and_questions(self):
        result = validate_quiz({})
        assert not result.ok
        assert set(result.codes()) == {"MISSING_ID", "MISSING_QUESTIONS"}

    def test_empty_questions(self):
        assert validate_quiz({"id": "q", "questions": []}).codes() == ["EMPTY_QUESTIONS"]

    @pytest.mark.parametrize("score", [1.5, -0.1, "0.5", True])
    def test_invalid_passing_score(self, score):
        data = _valid_quiz()
        data["passing_score"] = score
        assert "INVALID_PASSING_SCORE" in validate_quiz(data).codes()

    def test_camel_case_passing_score(self):
        data = _valid_quiz()
        del data["passing_score"]
        data["passingScore"] = 2
        assert "INVALID_PASSING_SCORE" in validate_quiz(data).codes()

    def test_duplicate_question_id(self):
        data = _valid_quiz()
        data["questions"][1]["id"] = "sc"
        result = validate_quiz(data)
        assert "DUPLICATE_QUESTION_ID" in result.codes()

    def test_all_problems_reported_together(self):
        data = _valid_quiz()
        del data["id"]
        data["questions"][0]["correct"] = "z"
        data["questions"][2]["correct"] = "yes"
        codes = validate_quiz(data).codes()
        assert {"MISSING_ID", "INVALID_OPTION_REFERENCE", "INVALID_BOOLEAN_CORRECT"} <= set(codes)


class TestQuestionLevel:
    def test_missing_type(self):
        data = _valid_quiz()
        del data["questions"][0]["type"]
        assert validate_quiz(data).codes() == ["MISSING_QUESTION_TYPE"]

    def test_unknown_type(self):
        assert validate_quiz(_with_question(0, type="essay")).codes() == ["UNKNOWN_QUESTION_TYPE"]

    def test_missing_question_id(self):
        assert "MISSING_QUESTION_ID" in validate_quiz(_with_question(2, id="")).codes()

    def test_missing_prompt(self):
        result = validate_quiz(_with_question(2, prompt=" "))
        assert result.codes() == ["MISSING_PROMPT"]
        assert result.errors[0].question_id == "tf"
        assert result.errors[0].path == "questions[2].prompt"


class TestMalformedIds:
    def test_list_question_id(self):
        result = validate_quiz(_with_question(2, id=["tf"]))
        assert result.codes() == ["INVALID_ID"]
        assert result.errors[0].path == "questions[2].id"

    def test_dict_option_id(self):
        data = _with_question(0, options=[{"id": {"a": 1}}, {"id": "b"}])
        assert validate_quiz(data).codes() == ["INVALID_ID"]

    def test_list_in_multiple_response_correct(self):
        data = _with_question(1, correct=[["a"]])
        assert validate_quiz(data).codes() == ["INVALID_OPTION_REFERENCE"]

    def test_non_string_blank_premise_and_response_ids(self):
        data = _with_question(3, blanks=[{"id": "city", "correct_answers": ["Paris"]},
                                         {"id": ["x"], "correct_answers": ["y"]}])
        data["questions"][4]["premises"].append({"id": {"p": 2}})
        data["questions"][4]["responses"].append({"id": 7})
        result = validate_quiz(data)
        assert result.codes() == ["INVALID_ID", "INVALID_ID", "INVALID_ID"]
        assert [e.question_id for e in result.errors] == ["fb", "mt", "mt"]


class TestChoiceQuestions:
    def test_insufficient_options(self):
        data = _with_question(0, options=[{"id": "b"}])
        assert validate_quiz(data).codes() == ["INSUFFICIENT_OPTIONS"]

    def test_duplicate_option(self):
        data = _with_question(0, options=[{"id": "b"}, {"id": "b"}])
        assert "DUPLICATE_OPTION_ID" in validate_quiz(data).codes()

    def test_single_choice_list_correct(self):
        assert validate_quiz(_with_question(0, correct=["b"])).codes() == ["INVALID_CORRECT_TYPE"]

    def test_multiple_response_empty_correct(self):
        assert validate_quiz(_with_question(1, correct=[])).codes() == ["EMPTY_CORRECT_ARRAY"]

    def test_multiple_response_bad_reference(self):
        assert validate_quiz(_with_question(1, correct=["a", "q"])).codes() == ["INVALID_OPTION_REFERENCE"]


class TestFillBlank:
    def test_marker_without_blank(self):
        data = _with_question(3, text="[[city]] and [[river]]")
        assert validate_quiz(data).codes() == ["MISSING_BLANK_IN_TEXT"]

    def test_blank_without_marker(self):
        data = _with_question(3, blanks=[
            {"id": "city", "correct_answers": ["Paris"]},
            {"id": "river", "correct_answers": ["Seine"]},
        ])
        assert validate_quiz(data).codes() == ["EXTRA_BLANK_IN_ARRAY"]

    def test_empty_correct_answers(self):
        data = _with_question(3, blanks=[{"id": "city", "correct_answers": []}])
        assert validate_quiz(data).codes() == ["EMPTY_CORRECT_ANSWERS"]

    def test_missing_blanks(self):
        data = _valid_quiz()
        del data["questions"][3]["blanks"]
        assert validate_quiz(data).codes() == ["MISSING_BLANKS"]


class TestMatching:
    def test_empty_premises(self):
        data = _with_question(4, premises=[])
        assert "EMPTY_PREMISES" in validate_quiz(data).codes()

    def test_missing_correct_pairs(self):
        data = _valid_quiz()
        del data["questions"][4]["correct_pairs"]
        assert validate_quiz(data).codes() == ["MISSING_CORRECT_PAIRS"]

    def test_bad_references(self):
        data = _with_question(4, correct_pairs=[{"premise": "p9", "response": "r9"}])
        assert validate_quiz(data).codes() == ["INVALID_PREMISE_REFERENCE", "INVALID_RESPONSE_REFERENCE"]

    def test_duplicate_response(self):
        data = _with_question(4, responses=[{"id": "r1"}, {"id": "r1"}])
        assert validate_quiz(data).codes() == ["DUPLICATE_RESPONSE_ID"]


class TestValidateFile:
    def test_valid_file(self, tmp_path):
        path = tmp_path / "quiz.json"
        path.write_text(json.dumps(_valid_quiz()), encoding="utf-8")
        result = validate_quiz_file(path)
        assert result.ok
        assert result.file == str(path)

    def test_missing_file(self, tmp_path):
        result = validate_quiz_file(tmp_path / "absent.json")
        assert result.codes() == ["FILE_NOT_FOUND"]

    def test_parse_error(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{", encoding="utf-8")
        result = validate_quiz_file(path)
        assert result.codes() == ["PARSE_ERROR"]
        assert "[PARSE_ERROR]" in result.summary()
