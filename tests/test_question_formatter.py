import random

from app.services.question_formatter import map_opentdb, map_trivia_api, shuffle_options


def test_shuffle_options_returns_copy():
    items = ["a", "b", "c", "d"]
    shuffled = shuffle_options(items, random.Random(1))

    assert items == ["a", "b", "c", "d"]
    assert sorted(shuffled) == items


def test_shuffle_is_reproducible_with_seeded_rng():
    assert shuffle_options(list("abcdef"), random.Random(42)) == shuffle_options(list("abcdef"), random.Random(42))


def test_map_opentdb_unescapes_and_marks_correct():
    questions = map_opentdb(
        [
            {
                "category": "Entertainment: Music",
                "type": "multiple",
                "difficulty": "hard",
                "question": "Which band released &#039;Abbey Road&#039;?",
                "correct_answer": "The Beatles",
                "incorrect_answers": ["The Who", "Queen", "Guns N&#039; Roses"],
            }
        ],
        random.Random(7),
    )

    question = questions[0]
    assert question["text"] == "Which band released 'Abbey Road'?"
    assert question["order"] == 1
    assert question["source"] == "OPENTDB"
    assert question["difficulty"] == "hard"
    assert "Guns N' Roses" in [o["text"] for o in question["options"]]
    assert [o["text"] for o in question["options"] if o["isCorrect"]] == ["The Beatles"]


def test_map_trivia_api_accepts_plain_string_question():
    questions = map_trivia_api(
        [
            {"question": "Is the Earth round?", "correctAnswer": "Yes", "incorrectAnswers": ["No"], "type": "boolean"},
            {"question": {"text": "2 + 3?"}, "correctAnswer": "5", "incorrectAnswers": ["4", "6", "7"]},
        ]
    )

    assert [q["text"] for q in questions] == ["Is the Earth round?", "2 + 3?"]
    assert questions[0]["type"] == "TRUE_FALSE"
    assert questions[1]["type"] == "MULTIPLE_CHOICE"
    assert [q["order"] for q in questions] == [1, 2]
    assert all(q["source"] == "TRIVIA_API" for q in questions)
