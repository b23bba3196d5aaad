"""Stand-ins for the OpenAI SDK used across tests."""

from types import SimpleNamespace

import httpx
import openai

REQUEST = httpx.Request("POST", "https://llm.test/v1/chat/completions")


def status_error(status_code: int, message: str) -> openai.APIStatusError:
    response = httpx.Response(status_code, request=REQUEST)
    return openai.APIStatusError(message, response=response, body=None)


def completion(content):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))]
    )


class FakeOpenAI:
    """Stands in for ``openai.OpenAI``; answers per model from a script."""

    def __init__(self, outcomes=None, model_ids=(), list_error=None):
        self.outcomes = dict(outcomes or {})
        self.requests = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))
        self.models = SimpleNamespace(list=self._list)
        self._model_ids = model_ids
        self._list_error = list_error

    def _create(self, **kwargs):
        self.requests.append(kwargs)
        outcome = self.outcomes[kwargs["model"]]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def _list(self):
        if self._list_error is not None:
            raise self._list_error
        return [SimpleNamespace(id=model_id) for model_id in self._model_ids]
