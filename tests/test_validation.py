import json
import tempfile
import unittest
from pathlib import Path

from schema_check.validation import (
    EngineError,
    LoadError,
    ProcessingMessage,
    ProcessingReport,
    SchemaFactory,
    SyntaxValidator,
    json_pointer,
    load_document,
)

PERSON_SCHEMA = {
    "type": "object",
    "properties": {"age": {"type": "integer"}},
    "required": ["age"],
}


class LoadDocumentTest(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.root = Path(self.tmp.name)

    def test_reads_json(self):
        path = self.root / "doc.json"
        path.write_text(json.dumps({"a": [1, 2]}), encoding="utf-8")
        self.assertEqual(load_document(str(path)), {"a": [1, 2]})

    def test_missing_file(self):
        missing = str(self.root / "missing.json")
        with self.assertRaises(LoadError) as ctx:
            load_document(missing)
        self.assertEqual(ctx.exception.path, missing)
        self.assertEqual(str(ctx.exception), f"{missing}: file not found")

    def test_malformed_json(self):
        path = self.root / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with self.assertRaises(LoadError) as ctx:
            load_document(str(path))
        self.assertIn("invalid JSON", str(ctx.exception))

    def test_nesting_beyond_the_recursion_limit(self):
        path = self.root / "deep.json"
        path.write_text("[" * 100000 + "]" * 100000, encoding="utf-8")
        with self.assertRaises(LoadError) as ctx:
            load_document(str(path))
        self.assertTrue(str(ctx.exception).startswith(f"{path}: invalid JSON"))


class ReportTest(unittest.TestCase):
    def test_pointer_escaping(self):
        self.assertEqual(json_pointer(["a/b", "c~d", 0]), "/a~1b/c~0d/0")
        self.assertEqual(json_pointer([]), "")

    def test_success_rendering(self):
        self.assertEqual(str(ProcessingReport(success=True)), "success")
        self.assertEqual(ProcessingReport(success=True, source="x.json").render(), "x.json: success")

    def test_failure_rendering(self):
        message = ProcessingMessage(
            message="'x' is not of type 'integer'",
            keyword="type",
            instance_pointer="/age",
            schema_pointer="/properties/age/type",
        )
        report = ProcessingReport(success=False, messages=(message,), source="p.json")
        self.assertEqual(
            report.render(),
            "\n".join(
                [
                    "p.json: failure",
                    "--- BEGIN MESSAGES ---",
                    "error: 'x' is not of type 'integer'",
                    '    level: "error"',
                    '    keyword: "type"',
                    '    instance: {"pointer": "/age"}',
                    '    schema: {"pointer": "/properties/age/type"}',
                    "--- END MESSAGES ---",
                ]
            ),
        )


class SyntaxValidatorTest(unittest.TestCase):
    def setUp(self) -> None:
        self.validator = SyntaxValidator()

    def test_valid_schema(self):
        report = self.validator.validate_schema(PERSON_SCHEMA)
        self.assertTrue(report.success)
        self.assertEqual(report.messages, ())

    def test_invalid_type_keyword(self):
        report = self.validator.validate_schema({"type": "foo"}, source="s.json")
        self.assertFalse(report.success)
        self.assertTrue(report.messages)
        self.assertEqual(report.messages[0].instance_pointer, "/type")
        self.assertTrue(report.render().startswith("s.json: failure"))

    def test_non_object_document(self):
        self.assertFalse(self.validator.validate_schema(42).success)
        self.assertFalse(self.validator.validate_schema([]).success)

    def test_declared_draft_is_used(self):
        # Boolean subschemas exist from draft 6 onwards only.
        schema = {"properties": {"a": True}}
        self.assertFalse(self.validator.validate_schema(schema).success)
        declared = dict(schema, **{"$schema": "http://json-schema.org/draft-07/schema#"})
        self.assertTrue(self.validator.validate_schema(declared).success)
        self.assertTrue(SyntaxValidator("draft7").validate_schema(schema).success)

    def test_unknown_schema_uri(self):
        report = self.validator.validate_schema({"$schema": "http://example.com/my-draft"})
        self.assertFalse(report.success)
        self.assertEqual(report.messages[0].keyword, "$schema")
        self.assertIn("unsupported $schema", report.messages[0].message)


class SchemaTest(unittest.TestCase):
    def setUp(self) -> None:
        self.factory = SchemaFactory()

    def test_instance_passes(self):
        schema = self.factory.get_schema(PERSON_SCHEMA)
        self.assertTrue(schema.validate({"age": 3}).success)

    def test_instance_failures_are_reported(self):
        schema = self.factory.get_schema(PERSON_SCHEMA, source="person.json")
        report = schema.validate({"age": "x"}, source="bob.json")
        self.assertFalse(report.success)
        self.assertEqual(len(report.messages), 1)
        message = report.messages[0]
        self.assertEqual(message.keyword, "type")
        self.assertEqual(message.instance_pointer, "/age")
        self.assertEqual(message.schema_pointer, "/properties/age/type")
        self.assertEqual(report.source, "bob.json")

        missing = schema.validate({})
        self.assertEqual([m.keyword for m in missing.messages], ["required"])
        self.assertEqual(missing.messages[0].instance_pointer, "")

    def test_invalid_schema_raises(self):
        with self.assertRaises(EngineError) as ctx:
            self.factory.get_schema({"type": 5}, source="bad.json")
        self.assertTrue(str(ctx.exception).startswith("bad.json: invalid schema"))

    def test_unknown_schema_uri_raises(self):
        with self.assertRaises(EngineError):
            self.factory.get_schema({"$schema": "http://example.com/my-draft"})

    def test_unresolvable_reference_raises(self):
        schema = self.factory.get_schema({"$ref": "#/definitions/missing"})
        with self.assertRaises(EngineError):
            schema.validate({})

    def test_self_reference_raises(self):
        schema = self.factory.get_schema({"$ref": "#"}, source="loop.json")
        with self.assertRaises(EngineError) as ctx:
            schema.validate({}, source="a.json")
        self.assertEqual(ctx.exception.path, "a.json")

    def test_format_assertions_are_opt_in(self):
        document = {"type": "string", "format": "ipv4"}
        self.assertTrue(self.factory.get_schema(document).validate("not-an-ip").success)
        strict = SchemaFactory(format_check=True).get_schema(document)
        self.assertFalse(strict.validate("not-an-ip").success)
        self.assertTrue(strict.validate("127.0.0.1").success)


if __name__ == "__main__":
    unittest.main()
