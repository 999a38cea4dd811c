"""
Tests for the identity form.
"""

import unittest

from tokenized_agents.provisioning.errors import InputError
from tokenized_agents.provisioning.identity import (
    FormInput,
    collect_identity,
    derive_symbol,
    validate_name,
)


def scripted(*answers):
    """Prompt stand-in returning answers in order."""
    it = iter(answers)
    asked = []

    def prompt(question):
        asked.append(question)
        return next(it)

    prompt.asked = asked
    return prompt


class TestValidateName(unittest.TestCase):

    def test_accepts_allowed_characters(self):
        for name in ["Nova", "a", "my agent", "agent_01", "x-y-z", "A" * 50]:
            self.assertEqual(validate_name(name), name)

    def test_rejects_empty(self):
        with self.assertRaises(InputError):
            validate_name("")

    def test_rejects_too_long(self):
        with self.assertRaises(InputError):
            validate_name("A" * 51)

    def test_rejects_disallowed_characters(self):
        for name in ["Nova!", "a/b", "émile", "tab\there", "dot.name"]:
            with self.assertRaises(InputError, msg=name):
                validate_name(name)


class TestDeriveSymbol(unittest.TestCase):

    def test_examples(self):
        self.assertEqual(derive_symbol("My Agent!"), "MYAGEN")
        self.assertEqual(derive_symbol("a"), "A")
        self.assertEqual(derive_symbol("Nova"), "NOVA")

    def test_strips_and_truncates(self):
        self.assertEqual(derive_symbol("big-bad_wolf 99"), "BIGBAD")
        self.assertLessEqual(len(derive_symbol("z" * 50)), 6)

    def test_deterministic(self):
        self.assertEqual(derive_symbol("Repeat Me"), derive_symbol("Repeat Me"))


class TestCollectIdentity(unittest.TestCase):

    def test_prompts_and_defaults_symbol(self):
        prompt = scripted("Nova", "", "sk-or-123")
        identity = collect_identity(FormInput(), prompt)
        self.assertEqual(identity.name, "Nova")
        self.assertEqual(identity.symbol, "NOVA")
        self.assertEqual(identity.credential, "sk-or-123")
        self.assertIn("[NOVA]", prompt.asked[1])

    def test_explicit_symbol_is_not_validated(self):
        identity = collect_identity(FormInput(), scripted("Nova", "nova-coin!", "key"))
        self.assertEqual(identity.symbol, "nova-coin!")

    def test_supplied_values_skip_prompts(self):
        prompt = scripted()
        identity = collect_identity(FormInput("Nova", "NV", "key"), prompt)
        self.assertEqual(identity.symbol, "NV")
        self.assertEqual(prompt.asked, [])

    def test_missing_credential_fails(self):
        with self.assertRaises(InputError):
            collect_identity(FormInput(), scripted("Nova", "", "   "))

    def test_bad_name_fails_before_other_questions(self):
        prompt = scripted("bad!name")
        with self.assertRaises(InputError):
            collect_identity(FormInput(), prompt)
        self.assertEqual(len(prompt.asked), 1)

    def test_repr_hides_credential(self):
        identity = collect_identity(FormInput("Nova", None, "secret-key"), scripted(""))
        self.assertNotIn("secret-key", repr(identity))
