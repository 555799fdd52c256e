import pytest

from gitproc.enums import ObjectType, ReferenceType
from gitproc.exceptions import ReferenceParseError
from gitproc.refs import (
    FOR_EACH_REF_FORMAT,
    Branch,
    BranchName,
    Reference,
    Tag,
    parse_reference_line,
    references_from_for_each_ref,
)

SHA = "0123456789abcdef0123456789abcdef01234567"


class TestParseReferenceLine:
    def test_local_branch_with_upstream(self) -> None:
        reference = parse_reference_line(
            f"{SHA} commit refs/heads/main refs/remotes/origin/main"
        )

        assert isinstance(reference, Branch)
        assert reference.object_id == SHA
        assert reference.object_type == ObjectType.COMMIT
        assert reference.upstream == BranchName("refs/remotes/origin/main")

    def test_branch_without_upstream(self) -> None:
        reference = parse_reference_line(f"{SHA} commit refs/heads/topic ")

        assert isinstance(reference, Branch)
        assert reference.upstream is None

    def test_three_field_line(self) -> None:
        reference = parse_reference_line(f"{SHA} commit refs/remotes/origin/main")

        assert isinstance(reference, Branch)
        assert reference.is_remote

    def test_annotated_tag(self) -> None:
        reference = parse_reference_line(f"{SHA} tag refs/tags/v1.0 ")

        assert isinstance(reference, Tag)
        assert reference.is_annotated

    def test_other_family_is_generic_reference(self) -> None:
        reference = parse_reference_line(f"{SHA} commit refs/stash ")

        assert type(reference) is Reference
        assert reference.reference_type == ReferenceType.STASH

    def test_unknown_object_type(self) -> None:
        reference = parse_reference_line(f"{SHA} weird refs/notes/commits")

        assert reference.object_type == ObjectType.UNKNOWN

    @pytest.mark.parametrize(
        "line",
        ["", SHA, f"{SHA} commit", f"{SHA} commit refs/heads/a b c", " commit refs/heads/a"],
    )
    def test_rejects_malformed_lines(self, line: str) -> None:
        with pytest.raises(ReferenceParseError) as exc_info:
            _ = parse_reference_line(line)

        assert exc_info.value.line == line

    def test_wraps_illegal_names(self) -> None:
        line = f"{SHA} commit refs/heads/bad..name "

        with pytest.raises(ReferenceParseError) as exc_info:
            _ = parse_reference_line(line)

        assert exc_info.value.__cause__ is not None


class TestReferencesFromForEachRef:
    def test_parses_all_lines_in_order(self) -> None:
        text = (
            f"{SHA} commit refs/heads/main refs/remotes/origin/main\n"
            "\n"
            f"{SHA} commit refs/remotes/origin/main \n"
            f"{SHA} tag refs/tags/v1 \n"
        )

        references = references_from_for_each_ref(text)

        assert [r.canonical_name for r in references] == [
            "refs/heads/main",
            "refs/remotes/origin/main",
            "refs/tags/v1",
        ]

    def test_format_argument_lists_expected_fields(self) -> None:
        assert FOR_EACH_REF_FORMAT.startswith("--format=")
        for field in ("%(objectname)", "%(objecttype)", "%(refname)", "%(upstream)"):
            assert field in FOR_EACH_REF_FORMAT
