import tempfile
import unittest
from importlib.util import find_spec
from pathlib import Path

from domain.entities import ChatCompletion
from domain.interfaces import ChatCompletionClient
from infrastructure.config import ContainerConfig, build_default_container


class _EchoClient(ChatCompletionClient):
    def __init__(self) -> None:
        self.messages = []

    def complete(self, messages, *, model=None, temperature=None, max_tokens=None, timeout=None) -> ChatCompletion:
        self.messages = list(messages)
        return ChatCompletion(content="Grounded answer", model=model or "test", prompt_tokens=10, completion_tokens=2, total_tokens=12)


@unittest.skipIf(find_spec("httpx") is None, "httpx is required for the FastAPI test client")
class TestApi(unittest.TestCase):
    def setUp(self) -> None:
        from fastapi.testclient import TestClient

        from ui.api.main import create_app

        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.container = build_default_container(
            ContainerConfig(db_path=str(Path(tmp.name) / "api.db"), rate_limit_requests=100)
        )
        self.container.completion_client = _EchoClient()
        self.client = TestClient(create_app(self.container))

    def _create(self, title: str, content: str, bot_id: int = 1) -> dict:
        response = self.client.post(f"/bots/{bot_id}/documents", json={"title": title, "content": content})
        self.assertEqual(response.status_code, 200, response.text)
        return response.json()

    def test_create_list_and_search(self) -> None:
        created = self._create("Returns", "Our return policy allows 30 day returns.")
        self._create("Catalog", "We sell laptops and desktops.")
        self.assertEqual(created["status"], "indexed")

        listed = self.client.get("/bots/1/documents").json()
        self.assertEqual([doc["title"] for doc in listed], ["Catalog", "Returns"])

        body = self.client.get("/bots/1/search", params={"q": "return policy"}).json()
        self.assertEqual(body["query"], "return policy")
        self.assertEqual(len(body["results"]), 1)
        hit = body["results"][0]
        self.assertEqual(hit["document_id"], created["id"])
        self.assertEqual(hit["score"], 3)
        self.assertEqual(hit["excerpt"], "Our return policy allows 30 day returns")

    def test_context(self) -> None:
        self._create("Returns", "Our return policy allows 30 day returns.")
        body = self.client.get("/bots/1/context", params={"q": "return policy"}).json()
        self.assertEqual(
            body["context"],
            'Relevant information from knowledge base:\n\n1. From "Returns":\nOur return policy allows 30 day returns',
        )
        empty = self.client.get("/bots/1/context", params={"q": "xyzzy"}).json()
        self.assertEqual(empty["context"], "")

    def test_status_updates(self) -> None:
        created = self._create("Doc", "Some content here")
        response = self.client.patch(f"/documents/{created['id']}/status", json={"status": "error"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["processing_error"], "Document processing failed")

        response = self.client.patch(f"/documents/{created['id']}/status", json={"status": "published"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error_code"], "INVALID_STATUS")

        response = self.client.patch("/documents/999/status", json={"status": "indexed"})
        self.assertEqual(response.status_code, 404)

    def test_empty_document_cannot_be_indexed(self) -> None:
        document = self.container.document_repository.create(1, "Upload pending")
        response = self.client.patch(f"/documents/{document.id}/status", json={"status": "indexed"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error_code"], "EMPTY_CONTENT")
        self.assertEqual(self.container.document_repository.get(document.id).status, "processing")

    def test_delete(self) -> None:
        created = self._create("Doc", "Some content here")
        self.assertEqual(self.client.delete(f"/documents/{created['id']}").json(), {"deleted": created["id"]})
        response = self.client.delete(f"/documents/{created['id']}")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error_code"], "NOT_FOUND")

    def test_upload(self) -> None:
        response = self.client.post(
            "/bots/1/documents/upload",
            params={"filename": "faq.txt"},
            content=b"Shipping is free over $50.",
            headers={"content-type": "text/plain"},
        )
        self.assertEqual(response.status_code, 200, response.text)
        self.assertEqual(response.json()["file_type"], "txt")
        self.assertEqual(response.json()["content"], "Shipping is free over $50.")

        response = self.client.post(
            "/bots/1/documents/upload",
            params={"filename": "logo.png"},
            content=b"\x89PNG",
            headers={"content-type": "image/png"},
        )
        self.assertEqual(response.status_code, 415)
        self.assertEqual(response.json()["error_code"], "UNSUPPORTED_FILE_TYPE")
        self.assertEqual(len(self.client.get("/bots/1/documents").json()), 1)

    def test_process_documents(self) -> None:
        self.container.document_repository.create(1, "Pending", "Needs indexing")
        body = self.client.post("/bots/1/process-documents").json()
        self.assertEqual(body["processed"], 1)
        self.assertEqual(body["total"], 1)

    def test_chat_uses_knowledge_base(self) -> None:
        self._create("Returns", "Our return policy allows 30 day returns.")
        response = self.client.post(
            "/chat",
            json={
                "bot_id": 1,
                "system_prompt": "You help shoppers.",
                "messages": [{"role": "user", "content": "What is the return policy?"}],
            },
        )
        self.assertEqual(response.status_code, 200, response.text)
        self.assertEqual(response.json()["content"], "Grounded answer")
        system = self.container.completion_client.messages[0]
        self.assertEqual(system.role, "system")
        self.assertIn('From "Returns"', system.content)

    def test_chat_rejects_unknown_roles(self) -> None:
        response = self.client.post("/chat", json={"bot_id": 1, "messages": [{"role": "robot", "content": "hi"}]})
        self.assertEqual(response.status_code, 422)

    def test_rate_limit(self) -> None:
        self.container.rate_limiter.reset()
        self.container.rate_limiter.max_requests = 2
        for _ in range(2):
            self.assertEqual(self.client.get("/bots/1/search", params={"q": "anything"}).status_code, 200)
        response = self.client.get("/bots/1/search", params={"q": "anything"})
        self.assertEqual(response.status_code, 429)
        self.assertEqual(response.json()["error_code"], "RATE_LIMITED")


if __name__ == "__main__":
    unittest.main()
