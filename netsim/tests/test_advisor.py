import os
import unittest
from types import SimpleNamespace
from unittest import mock

from ai.cli_advisor import DEFAULT_MODEL, CLIAdvisor, CLIHint
from netsim.core import NetworkStore
from netsim.cli import CLIEngine


class TestCLIAdvisor(unittest.TestCase):
    def test_without_api_key_no_client_is_built(self):
        with mock.patch.dict(os.environ, {}, clear=True), \
                mock.patch("ai.cli_advisor.OpenAI") as client_cls:
            advisor = CLIAdvisor()
            self.assertFalse(advisor.enabled)
            self.assertIsNone(advisor("conf t", "% Unknown command"))
            client_cls.assert_not_called()

    def test_model_from_environment(self):
        with mock.patch.dict(os.environ, {"NETSIM_AI_MODEL": "gpt-test"}, clear=True):
            self.assertEqual(CLIAdvisor().model, "gpt-test")
        with mock.patch.dict(os.environ, {}, clear=True):
            self.assertEqual(CLIAdvisor().model, DEFAULT_MODEL)
            self.assertEqual(CLIAdvisor(model="explicit").model, "explicit")

    def test_structured_reply(self):
        client = mock.MagicMock()
        client.responses.parse.return_value = SimpleNamespace(output_parsed=CLIHint(tip="  Type enable first. "))

        with mock.patch.dict(os.environ, {"OPENAI_API_KEY": "sk-test"}, clear=True), \
                mock.patch("ai.cli_advisor.OpenAI", return_value=client):
            advisor = CLIAdvisor(model="gpt-test")
            self.assertEqual(advisor("conf t", "% Unknown command"), "Type enable first.")

        kwargs = client.responses.parse.call_args.kwargs
        self.assertEqual(kwargs["model"], "gpt-test")
        self.assertIs(kwargs["text_format"], CLIHint)
        user_parts = kwargs["input"][1]["content"]
        self.assertEqual(user_parts[0]["text"], "COMMAND:\nconf t")
        self.assertEqual(user_parts[1]["text"], "ERROR:\n% Unknown command")

    def test_empty_tip_is_no_hint(self):
        client = mock.MagicMock()
        client.responses.parse.return_value = SimpleNamespace(output_parsed=CLIHint(tip=""))
        with mock.patch.dict(os.environ, {"OPENAI_API_KEY": "sk-test"}, clear=True), \
                mock.patch("ai.cli_advisor.OpenAI", return_value=client):
            self.assertIsNone(CLIAdvisor()("x", "% Unknown command"))

    def test_hint_schema_forbids_extra_keys(self):
        schema = CLIHint.model_json_schema()
        self.assertFalse(schema.get("additionalProperties", True))

    def test_plugs_into_engine(self):
        client = mock.MagicMock()
        client.responses.parse.return_value = SimpleNamespace(output_parsed=CLIHint(tip="Use enable."))
        store = NetworkStore()
        store.add_device("R1", "ROUTER")

        with mock.patch.dict(os.environ, {"OPENAI_API_KEY": "sk-test"}, clear=True), \
                mock.patch("ai.cli_advisor.OpenAI", return_value=client):
            cli = CLIEngine(store, advisor=CLIAdvisor())
            ctx = cli.new_context("R1")
            cli.execute(ctx, "conf t")
            self.assertEqual(cli.drain_hints(ctx, timeout=2.0), ["[AI Tip]: Use enable."])


if __name__ == "__main__":
    unittest.main()
