from django.test import SimpleTestCase

from api.errors import IllegalTransition
from glossary.models import TermVersion
from glossary.workflow import EditMode, can_transition, decide, ensure_transition

Status = TermVersion.Status


class DecideTests(SimpleTestCase):
    def test_decision_table(self):
        cases = [
            (Status.DRAFT, "createFromSource", EditMode.EDIT_EXISTING),
            (Status.DRAFT, None, EditMode.EDIT_EXISTING),
            (Status.DRAFT, "somethingElse", EditMode.EDIT_EXISTING),
            (Status.PUBLISHED, "createFromSource", EditMode.CREATE_FROM_SOURCE),
            (Status.PUBLISHED, None, EditMode.NOT_EDITABLE),
            (Status.PUBLISHED, "somethingElse", EditMode.NOT_EDITABLE),
            (Status.ARCHIVED, "createFromSource", EditMode.CREATE_FROM_SOURCE),
            (Status.ARCHIVED, None, EditMode.NOT_EDITABLE),
            (Status.ARCHIVED, "somethingElse", EditMode.NOT_EDITABLE),
        ]
        for status, hint, expected in cases:
            with self.subTest(status=status, hint=hint):
                self.assertEqual(decide(status, hint), expected)

    def test_plain_string_status(self):
        self.assertEqual(decide("PUBLISHED", "createFromSource"), EditMode.CREATE_FROM_SOURCE)

    def test_unknown_status(self):
        with self.assertRaises(IllegalTransition):
            decide("REJECTED")


class TransitionTests(SimpleTestCase):
    def test_allowed(self):
        self.assertTrue(can_transition(Status.DRAFT, Status.PUBLISHED))
        self.assertTrue(can_transition(Status.PUBLISHED, Status.ARCHIVED))
        self.assertTrue(can_transition(Status.ARCHIVED, Status.PUBLISHED))

    def test_rejected(self):
        for current, target in [
            (Status.DRAFT, Status.ARCHIVED),
            (Status.PUBLISHED, Status.DRAFT),
            (Status.ARCHIVED, Status.DRAFT),
            (Status.PUBLISHED, Status.PUBLISHED),
        ]:
            with self.subTest(current=current, target=target):
                with self.assertRaises(IllegalTransition):
                    ensure_transition(current, target)
