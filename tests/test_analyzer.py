"""End-to-end tests for project analysis and per-file views."""

import json

import pytest

from transient_scan.analyzer import ProjectAnalyzer, analyze_project, project_file_views
from transient_scan.models import SourceFile
from transient_scan.verdict import VersionPolicy

FOUNDRY_IR_ON = '[profile.default]\nsolc_version = "0.8.30"\nvia_ir = true\n'
FOUNDRY_IR_OFF = '[profile.default]\nsolc_version = "0.8.30"\nvia_ir = false\n'
FOUNDRY_IR_UNSET = '[profile.default]\nsolc_version = "0.8.30"\n'


class TestAnalyzeProject:
    """Test the full pipeline over in-memory sources."""

    def test_inherited_collision(self, inherited_collision_files):
        """Test the child contract reports the parent's mapping delete."""
        verdict = analyze_project(inherited_collision_files)

        # Should detect exactly one collision, in B only
        assert len(verdict.collisions) == 1
        collision = verdict.collisions[0]
        assert collision.contract == "B"
        assert collision.source_file == "b.sol"
        assert collision.type == "address"
        assert collision.scope == "Runtime"
        assert collision.transient_display_texts == ["delete t"]
        assert collision.persistent_display_texts == ["delete m[id]"]

    def test_parent_alone_is_safe(self, inherited_collision_files):
        """Test the parent contract by itself has no collision."""
        verdict = analyze_project(inherited_collision_files[:1])

        assert verdict.collisions == []
        assert verdict.status == "SAFE"

    def test_no_clearing_expressions(self):
        """Test a project without clearings is SAFE with no collisions."""
        verdict = analyze_project([("a.sol", "pragma solidity 0.8.30; contract A { uint256 x; }")])

        assert verdict.status == "SAFE"
        assert verdict.collisions == []
        assert verdict.active_version == "0.8.30"

    def test_scope_isolation(self):
        """Test creation-only and runtime-only clearings never collide."""
        source = (
            "contract C { mapping(uint256=>address) public m; address transient t; "
            "constructor() { delete m[1]; } "
            "function f() external { delete t; } }"
        )
        verdict = analyze_project([("c.sol", source)], FOUNDRY_IR_ON)

        assert verdict.collisions == []
        assert verdict.status == "SAFE"

    def test_creation_scope_collision(self):
        """Test two clearings inside the constructor collide in creation code."""
        source = (
            "contract C { mapping(uint256=>address) public m; address transient t; "
            "constructor() { delete m[1]; delete t; } }"
        )
        verdict = analyze_project([("c.sol", source)], FOUNDRY_IR_ON)

        assert [c.scope for c in verdict.collisions] == ["Creation"]

    def test_struct_propagation(self):
        """Test deleting a struct collides through its member type."""
        source = (
            "struct Info { address owner; uint64 stamp; } "
            "contract C { Info public info; address transient t; "
            "function f() external { delete info; delete t; } }"
        )
        verdict = analyze_project([("c.sol", source)])

        assert [c.type for c in verdict.collisions] == ["address"]

    def test_library_code_is_in_scope(self):
        """Test a persistent clearing inside a used library is detected."""
        files = [
            ("lib.sol", "library Slots { function trim(address[] storage xs) internal { xs.pop(); } }"),
            ("c.sol", "contract C { address[] list; address transient t; "
                      "function f() external { Slots.trim(list); delete t; } }"),
        ]
        verdict = analyze_project(files)

        assert [(c.contract, c.type) for c in verdict.collisions] == [("C", "address")]
        assert verdict.collisions[0].persistent_display_texts == ["xs.pop()"]

    def test_two_arrays_of_same_type(self):
        """Test popping a transient and a persistent array of one type collides."""
        source = (
            "contract C { address[] transient ta; address[] pa; "
            "function f() external { ta.pop(); pa.pop(); } }"
        )
        verdict = analyze_project([("c.sol", source)])

        assert [c.type for c in verdict.collisions] == ["address"]
        assert verdict.collisions[0].transient_display_texts == ["ta.pop()"]
        assert verdict.collisions[0].persistent_display_texts == ["pa.pop()"]

    def test_comments_and_strings_do_not_count(self):
        """Test clearings inside comments or strings are ignored."""
        source = (
            "contract C { mapping(uint256=>address) public m; address transient t; "
            "function f() external { delete t; // delete m[1];\n"
            ' string memory s = "delete m[2]"; } }'
        )
        verdict = analyze_project([("c.sol", source)])

        assert verdict.collisions == []


class TestVersionGating:
    """Test verdicts once a collision exists."""

    def test_unaffected_pragma_is_warning(self, inherited_collision_files):
        """Test a pragma outside the affected set gives WARNING."""
        files = [("v.sol", "pragma solidity 0.8.27;")] + inherited_collision_files
        verdict = analyze_project(files)

        assert verdict.status == "WARNING"
        assert verdict.active_version == "0.8.27"
        assert not verdict.is_vulnerable_version

    @pytest.mark.parametrize("config_text, status, via_ir", [
        (FOUNDRY_IR_ON, "VULNERABLE", True),
        (FOUNDRY_IR_OFF, "SAFE", False),
        (FOUNDRY_IR_UNSET, "WARNING", None),
    ])
    def test_via_ir_flag(self, inherited_collision_files, config_text, status, via_ir):
        """Test the IR pipeline flag decides for an affected version."""
        verdict = analyze_project(inherited_collision_files, config_text)

        assert verdict.status == status
        assert verdict.via_ir_enabled is via_ir
        assert verdict.active_version == "0.8.30"
        assert verdict.config_version == "0.8.30"
        assert verdict.framework == "foundry"

    def test_config_version_overrides_pragma(self, inherited_collision_files):
        """Test a pinned config version wins over the pragma."""
        files = [("v.sol", "pragma solidity 0.8.27;")] + inherited_collision_files
        verdict = analyze_project(files, FOUNDRY_IR_ON)

        assert verdict.active_version == "0.8.30"
        assert verdict.status == "VULNERABLE"

    def test_custom_policy(self, inherited_collision_files):
        """Test a narrowed policy changes the outcome."""
        policy = VersionPolicy(vulnerable_versions=("0.8.31",))
        verdict = ProjectAnalyzer(policy).analyze(inherited_collision_files, FOUNDRY_IR_ON)

        assert verdict.status == "WARNING"
        assert "0.8.31 ~ 0.8.31" in verdict.reason


class TestAnalyzerBehaviour:
    """Test determinism, error handling and the variable inventory."""

    def test_runs_are_identical(self, inherited_collision_files):
        """Test identical inputs give identical serialized verdicts."""
        first = analyze_project(inherited_collision_files, FOUNDRY_IR_ON).to_dict()
        second = analyze_project(inherited_collision_files, FOUNDRY_IR_ON).to_dict()

        assert json.dumps(first, sort_keys=True) == json.dumps(second, sort_keys=True)

    def test_internal_failure_becomes_error(self):
        """Test an exception is turned into a single ERROR verdict."""
        verdict = analyze_project([SourceFile("broken.sol", None)])

        assert verdict.status == "ERROR"
        assert verdict.reason
        assert verdict.collisions == []

    def test_variables_are_reported(self, inherited_collision_files):
        """Test resolved declarations are listed per contract."""
        verdict = analyze_project(inherited_collision_files)
        seen = {(v.contract, v.name, v.declared_type, v.is_transient) for v in verdict.variables}

        assert ("A", "m", "mapping(uint256=>address)", False) in seen
        assert ("B", "t", "address", True) in seen


class TestProjectFileViews:
    """Test projection of a project verdict onto files."""

    def test_only_contributing_files_inherit_status(self, inherited_collision_files):
        """Test files without collisions are SAFE but share the reason."""
        verdict = analyze_project(inherited_collision_files, FOUNDRY_IR_ON)
        views = project_file_views(inherited_collision_files, verdict)

        assert [(v.path, v.status) for v in views] == [("b.sol", "VULNERABLE"), ("a.sol", "SAFE")]
        assert all(v.reason == verdict.reason for v in views)
        assert len(views[0].collisions) == 1
        assert views[1].collisions == []

    def test_error_applies_to_every_file(self):
        """Test an ERROR verdict marks every file as ERROR."""
        files = [SourceFile("a.sol", "contract A {}"), SourceFile("b.sol", None)]
        verdict = analyze_project(files)
        views = project_file_views(files, verdict)

        assert {v.status for v in views} == {"ERROR"}
