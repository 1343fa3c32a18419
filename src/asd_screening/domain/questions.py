from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Tuple

MAX_ANSWER_VALUE = 3


@dataclass(frozen=True)
class Question:
    qid: str
    category: str
    text: str
    options: Tuple[str, ...]


DEFAULT_QUESTION_BANK: Tuple[Question, ...] = (
    Question(
        qid="1",
        category="Social Communication",
        text="How often does the individual make eye contact during conversations?",
        options=(
            "Always maintains appropriate eye contact",
            "Usually makes eye contact",
            "Sometimes avoids eye contact",
            "Rarely or never makes eye contact",
        ),
    ),
    Question(
        qid="2",
        category="Social Communication",
        text="How does the individual respond to their name being called?",
        options=(
            "Always responds immediately",
            "Usually responds",
            "Sometimes responds with delay",
            "Rarely or never responds",
        ),
    ),
    Question(
        qid="3",
        category="Repetitive Behaviors",
        text="Does the individual engage in repetitive movements or behaviors?",
        options=(
            "No repetitive behaviors observed",
            "Occasional repetitive behaviors",
            "Frequent repetitive behaviors",
            "Constant repetitive behaviors that interfere with daily activities",
        ),
    ),
    Question(
        qid="4",
        category="Sensory Processing",
        text="How does the individual react to sensory stimuli (sounds, lights, textures)?",
        options=(
            "Typical reactions to sensory input",
            "Mild sensitivity to some stimuli",
            "Moderate over- or under-sensitivity",
            "Severe sensory sensitivities affecting daily life",
        ),
    ),
    Question(
        qid="5",
        category="Social Interaction",
        text="How well does the individual engage in interactive play or activities?",
        options=(
            "Actively seeks and enjoys interactive play",
            "Participates when encouraged",
            "Limited interest in interactive activities",
            "Avoids or shows no interest in interactive play",
        ),
    ),
    Question(
        qid="6",
        category="Communication",
        text="How does the individual use gestures and nonverbal communication?",
        options=(
            "Uses gestures naturally and appropriately",
            "Uses some gestures with prompting",
            "Limited use of gestures",
            "Does not use gestures for communication",
        ),
    ),
)


def load_question_bank(path: Path) -> List[Question]:
    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, list) or len(raw) < 1:
        raise ValueError("Question bank must be a non-empty list")
    out: List[Question] = []
    seen: set[str] = set()
    for item in raw:
        qid = str(item["id"])
        if qid in seen:
            raise ValueError(f"Duplicate question id: {qid}")
        seen.add(qid)
        options = tuple(str(o) for o in item.get("options", []))
        if len(options) != MAX_ANSWER_VALUE + 1:
            raise ValueError(f"Question {qid} must have {MAX_ANSWER_VALUE + 1} options")
        out.append(
            Question(
                qid=qid,
                category=str(item["category"]),
                text=str(item["text"]),
                options=options,
            )
        )
    return out


def questions_by_category(questions: List[Question] | Tuple[Question, ...]) -> Dict[str, List[Question]]:
    grouped: Dict[str, List[Question]] = {}
    for q in questions:
        grouped.setdefault(q.category, []).append(q)
    return grouped
