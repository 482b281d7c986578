from pathlib import Path
from typing import List, Optional

import pytest

from core.charts import ChartPayload
from core.errors import ExternalServiceError
from core.vocabulary import build_vocabulary
from dispatcher import Dispatcher
from helpers.datasources import JsonDocumentStore
from helpers.dialogue import DialogueResponse


SAMPLE_RECORDS = [
    {
        "pid": 1,
        "sex": "female",
        "age": 65,
        "english_content": "Patient with PO intake reduced. Aortic stenosis noted. Aortic valve replaced.",
        "date_content": [
            [2019, 3, 2, "Admitted with chest pain"],
            [2019, 3, 1, "Aortic stenosis found on echo"],
            [2019, 4, 10, "Discharged after valve surgery"],
        ],
    },
    {
        "pid": 2,
        "sex": "female",
        "age": 62,
        "english_content": "PO diet resumed. Fever and cough improved with antibiotics.",
        "date_content": [
            [2020, 1, 5, "Fever and cough started"],
            [2020, 1, 8, "Antibiotics given. Fever resolved"],
        ],
    },
    {
        "pid": 3,
        "sex": "male",
        "age": 70,
        "english_content": "He had cancer of the lung. Chemotherapy started.",
        "date_content": [
            [2018, 6, 1, "Cancer diagnosed. Chemotherapy planned"],
            [2018, 7, 1, "Chemotherapy caused nausea. Nausea treated"],
        ],
    },
    {
        "pid": 4,
        "sex": "male",
        "age": 45,
        "english_content": "Aortic dissection repaired. PO medication continued.",
        "date_content": [],
    },
    {
        "pid": 5,
        "sex": "female",
        "age": 30,
        "english_content": "Pregnancy uneventful.",
        "date_content": [[2021, 2, 2, "Routine checkup"]],
    },
]


class RecordingRenderer:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.rendered: List[ChartPayload] = []

    def render(self, payload: ChartPayload) -> Path:
        if self.fail:
            raise ExternalServiceError("chart renderer", "no kaleido")
        self.rendered.append(payload)
        return Path(f"/tmp/{payload.kind.value}.png")


class StaticUploader:
    def __init__(self, link: str = "https://i.imgur.com/abc123.png") -> None:
        self.link = link
        self.uploaded: List[Path] = []

    def upload(self, path: Path) -> str:
        self.uploaded.append(path)
        return self.link


class ScriptedDialogue:
    def __init__(self, action: str = "", speech: str = "", error: Optional[Exception] = None) -> None:
        self.response = DialogueResponse(action=action, fulfillment_text=speech)
        self.error = error
        self.messages: List[str] = []

    def interpret(self, text: str) -> DialogueResponse:
        self.messages.append(text)
        if self.error is not None:
            raise self.error
        return self.response


class UnreachableStore:
    def find(self, record_filter):
        raise ExternalServiceError("record store", "connection refused")

    def find_all(self):
        raise ExternalServiceError("record store", "connection refused")


@pytest.fixture
def sample_records():
    return SAMPLE_RECORDS


@pytest.fixture
def vocabulary():
    return build_vocabulary()


@pytest.fixture
def store() -> JsonDocumentStore:
    return JsonDocumentStore(SAMPLE_RECORDS)


@pytest.fixture
def renderer() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture
def uploader() -> StaticUploader:
    return StaticUploader()


@pytest.fixture
def dispatcher(store, renderer, uploader, vocabulary) -> Dispatcher:
    return Dispatcher(store, renderer=renderer, uploader=uploader, vocabulary=vocabulary)


@pytest.fixture
def unreachable_store() -> UnreachableStore:
    return UnreachableStore()


@pytest.fixture
def failing_renderer() -> RecordingRenderer:
    return RecordingRenderer(fail=True)


@pytest.fixture
def dialogue_factory():
    return ScriptedDialogue
