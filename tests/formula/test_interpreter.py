"""Tests for the directive interpreter."""

import pytest

from src.formula.errors import InvalidDirective, UnknownDirective
from src.formula.interpreter import DirectiveInterpreter, formula_name
from src.formula.version import parse_version
from src.models.formula import BottleInfo, DependencyType
from src.recipe.parser import parse_recipe

PATH = "Formula/tool.rb"


@pytest.fixture
def interpret(recipe):
    """Interpret a class body and build its record without an install procedure."""

    def _interpret(body: str, class_name: str = "Tool"):
        program = parse_recipe(recipe(class_name, body), PATH)
        builder = DirectiveInterpreter(PATH).interpret(program.body[0])
        return builder.build(install=None, version_parser=parse_version)

    return _interpret


class TestFields:
    """Tests for directives that set one record field."""

    def test_metadata_with_derived_version(self, interpret):
        """Without a version directive the version comes from the url."""
        record = interpret(
            """
            desc "A tool"
            homepage "https://example.org"
            url "https://x/pkg-1.2.tar.gz"
            sha256 "abcd"
            """
        )
        assert record.name == "tool"
        assert record.desc == "A tool"
        assert record.homepage == "https://example.org"
        assert record.url == "https://x/pkg-1.2.tar.gz"
        assert record.sha256 == "abcd"
        assert record.version == "1.2"
        assert record.install is None

    def test_explicit_version_wins(self, interpret):
        record = interpret('url "https://x/pkg-1.2.tar.gz"\nversion "2024.01"')
        assert record.version == "2024.01"

    def test_revision(self, interpret):
        assert interpret("revision 3").revision == 3

    def test_url_options_ignored(self, interpret):
        record = interpret('url "https://x/tool.git", tag: "v1.0", revision: "abc123"')
        assert record.url == "https://x/tool.git"
        assert record.version is None

    def test_name_from_class(self, interpret):
        assert interpret('desc "x"', class_name="LibfooBar").name == "libfoobar"

    def test_formula_name_drops_namespace(self):
        assert formula_name("Homebrew::Openssl") == "openssl"


class TestDependencies:
    """Tests for depends_on."""

    def test_runtime_and_build(self, interpret):
        record = interpret('depends_on "foo"\ndepends_on "bar" => :build')
        assert record.dependencies == {
            DependencyType.RUNTIME: ["foo"],
            DependencyType.BUILD: ["bar"],
        }

    def test_declaration_order_kept(self, interpret):
        record = interpret('depends_on "zlib"\ndepends_on "openssl"\ndepends_on "libidn2"')
        assert record.dependencies_of(DependencyType.RUNTIME) == ["zlib", "openssl", "libidn2"]

    def test_multiple_tags(self, interpret):
        record = interpret('depends_on "python" => [:build, :test]')
        assert record.dependencies_of(DependencyType.BUILD) == ["python"]
        assert record.dependencies_of(DependencyType.TEST) == ["python"]
        assert record.dependencies_of(DependencyType.RUNTIME) == []

    def test_label_form(self, interpret):
        record = interpret("depends_on cmake: :build")
        assert record.dependencies == {DependencyType.BUILD: ["cmake"]}

    def test_requirements_not_recorded(self, interpret):
        """System requirements are accepted and kept out of the dependency lists."""
        record = interpret(
            """
            depends_on :xcode
            depends_on macos: :catalina
            depends_on xcode: ["12.0", :build]
            depends_on arch: :x86_64
            depends_on "zlib"
            """
        )
        assert record.dependencies == {DependencyType.RUNTIME: ["zlib"]}

    def test_version_strings_in_tags_skipped(self, interpret):
        record = interpret('depends_on "python" => ["3.11", :build]')
        assert record.dependencies == {DependencyType.BUILD: ["python"]}

    def test_unknown_tag(self, interpret):
        with pytest.raises(InvalidDirective, match="unknown dependency type 'bogus'"):
            interpret('depends_on "x" => :bogus')

    def test_missing_name(self, interpret):
        with pytest.raises(InvalidDirective, match="expected a dependency name"):
            interpret("depends_on")


class TestBottle:
    """Tests for the bottle block."""

    def test_bottle_block(self, interpret):
        """Both checksum syntaxes; rebuild propagates to the record."""
        record = interpret(
            """
            bottle do
              rebuild 1
              sha256 cellar: :any, arm64_sonoma: "aaa", ventura: "bbb"
              sha256 "ccc" => :big_sur
            end
            """
        )
        assert record.bottle == BottleInfo(
            rebuild=1,
            releases={"arm64_sonoma": "aaa", "ventura": "bbb", "big_sur": "ccc"},
            cellars={"arm64_sonoma": "any", "ventura": "any"},
        )
        assert record.rebuild == 1

    def test_cellar_per_checksum_line(self, interpret):
        """A `cellar:` entry applies only to the platforms on its own line."""
        record = interpret(
            """
            bottle do
              sha256 cellar: :any, arm64_sonoma: "aaa"
              sha256 cellar: :any_skip_relocation, ventura: "bbb"
              sha256 "ccc" => :big_sur
            end
            """
        )
        assert record.bottle.cellar is None
        assert record.bottle.cellars == {
            "arm64_sonoma": "any",
            "ventura": "any_skip_relocation",
        }
        assert record.bottle.releases == {"arm64_sonoma": "aaa", "ventura": "bbb", "big_sur": "ccc"}

    def test_cellar_and_root_url_directives(self, interpret):
        record = interpret(
            """
            bottle do
              root_url "https://ghcr.io/v2/homebrew/core"
              cellar :any_skip_relocation
              sha256 "ddd" => :catalina
            end
            """
        )
        assert record.bottle.cellar == "any_skip_relocation"
        assert record.bottle.root_url == "https://ghcr.io/v2/homebrew/core"
        assert record.rebuild is None

    def test_unneeded(self, interpret):
        assert interpret("bottle :unneeded").bottle is None

    def test_unknown_bottle_directive(self, interpret):
        with pytest.raises(UnknownDirective, match="prefix"):
            interpret('bottle do\n  prefix "/opt/homebrew"\nend')

    def test_bad_checksum_entry(self, interpret):
        with pytest.raises(InvalidDirective, match="cannot read checksum entry"):
            interpret('bottle do\n  sha256 "a" => "b"\nend')


class TestSources:
    """Tests for head and stable."""

    def test_head_url_does_not_override_stable(self, interpret):
        record = interpret(
            """
            url "https://x/tool-1.0.tar.gz"
            head "https://github.com/x/tool.git", branch: "main"
            """
        )
        assert record.url == "https://x/tool-1.0.tar.gz"
        assert record.version == "1.0"
        assert record.head.url == "https://github.com/x/tool.git"

    def test_head_only(self, interpret):
        record = interpret('head "https://github.com/x/tool.git"')
        assert record.url == "https://github.com/x/tool.git"
        assert record.version == "HEAD"

    def test_head_block(self, interpret):
        record = interpret(
            """
            url "https://x/tool-1.0.tar.gz"
            head do
              url "https://github.com/x/tool.git"
              depends_on "autoconf" => :build
            end
            """
        )
        assert record.head.url == "https://github.com/x/tool.git"
        assert record.head.dependencies == {DependencyType.BUILD: ["autoconf"]}

    def test_stable_overrides_url(self, interpret):
        record = interpret(
            """
            url "https://x/tool-1.0.tar.gz"
            sha256 "old"
            stable do
              url "https://x/tool-2.0.tar.gz"
              sha256 "beef"
              depends_on "zlib"
            end
            """
        )
        assert record.url == "https://x/tool-2.0.tar.gz"
        assert record.sha256 == "beef"
        assert record.version == "2.0"
        assert record.stable.dependencies == {DependencyType.RUNTIME: ["zlib"]}

    def test_stable_without_sha256_drops_top_level_checksum(self, interpret):
        """The stable url and sha256 replace the top-level pair together."""
        record = interpret(
            """
            url "https://x/a-2.0.tar.gz"
            sha256 "top"
            stable do
              url "https://x/a-3.0.tar.gz"
            end
            """
        )
        assert record.url == "https://x/a-3.0.tar.gz"
        assert record.sha256 is None
        assert record.version == "3.0"

    def test_stable_without_block(self, interpret):
        with pytest.raises(InvalidDirective, match="expected a block"):
            interpret('stable "https://x/tool-1.0.tar.gz"')

    def test_head_without_url(self, interpret):
        with pytest.raises(InvalidDirective, match="no url given"):
            interpret('head do\n  depends_on "x"\nend')


class TestNoEffectDirectives:
    """Directives that parse but contribute nothing."""

    def test_accepted_and_ignored(self, interpret):
        record = interpret(
            """
            desc "A tool"
            license "MIT"
            uses_from_macos "zlib"
            version_scheme 1
            livecheck do
              url :stable
            end
            resource "extra" do
              url "https://x/extra-1.0.tar.gz"
            end
            patch do
              url "https://x/fix.patch"
            end

            def caveats
              "Run tool --setup first"
            end

            test do
              assert_match "tool", shell_output("#{bin}/tool --version")
            end
            """
        )
        assert record.desc == "A tool"
        assert record.dependencies == {}
        assert record.url is None


class TestErrors:
    """Closed dispatch: anything unknown fails."""

    def test_unknown_directive(self, interpret):
        with pytest.raises(UnknownDirective) as exc_info:
            interpret('desc "x"\nfrobnicate "y"')
        error = exc_info.value
        assert error.name == "frobnicate"
        assert error.path == PATH
        assert error.line == 3

    def test_receiver_call_rejected(self, interpret):
        with pytest.raises(UnknownDirective, match="command_call"):
            interpret('Foo.bar "x"')

    def test_statement_rejected(self, interpret):
        with pytest.raises(UnknownDirective, match="'if'"):
            interpret('if OS.mac?\n  desc "x"\nend')

    def test_interpolated_string(self, interpret):
        with pytest.raises(InvalidDirective, match="interpolated"):
            interpret('desc "#{name} tool"')

    def test_wrong_argument_count(self, interpret):
        with pytest.raises(InvalidDirective, match="expected 1 argument, got 2"):
            interpret('desc "a", "b"')

    def test_symbol_where_string_expected(self, interpret):
        with pytest.raises(InvalidDirective, match="expected a string"):
            interpret("homepage :none")

    def test_non_integer_revision(self, interpret):
        with pytest.raises(InvalidDirective, match="expected a single integer"):
            interpret('revision "1"')

    def test_dynamic_argument(self, interpret):
        with pytest.raises(InvalidDirective, match="not a static value"):
            interpret("url stable_url")
