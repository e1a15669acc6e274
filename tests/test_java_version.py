"""Tests for .java-version derivation"""
import pytest

from git_workspaces.services.java_version import VersionFileOutcome, derive_version_file, extract_java_version

COMPILER_PLUGIN_POM = """<project>
  <build><plugins>
    <plugin>
      <groupId>org.apache.maven.plugins</groupId>
      <artifactId>maven-compiler-plugin</artifactId>
      <configuration><source>11</source></configuration>
    </plugin>
  </plugins></build>
</project>
"""


class TestExtractJavaVersion:
    """Test the patterns tried against pom.xml, in priority order."""

    @pytest.mark.parametrize(
        "pom,expected",
        [
            ("<properties><java.version>17</java.version></properties>", "17"),
            ("<properties><maven.compiler.source>1.8</maven.compiler.source></properties>", "1.8"),
            ("<properties><maven.compiler.target>21</maven.compiler.target></properties>", "21"),
            (COMPILER_PLUGIN_POM, "11"),
            ("<properties><jdk.version>17</jdk.version></properties>", "17"),
        ],
    )
    def test_patterns(self, pom, expected):
        assert extract_java_version(pom) == expected

    def test_java_version_wins(self):
        pom = (
            "<properties><maven.compiler.source>11</maven.compiler.source>"
            "<java.version>17</java.version></properties>"
        )
        assert extract_java_version(pom) == "17"

    def test_nothing_declared(self):
        assert extract_java_version("<project><version>1.0.0</version></project>") is None


class TestDeriveVersionFile:
    """Test writing .java-version into a worktree."""

    def test_written_from_root_pom(self, temp_dir):
        (temp_dir / "pom.xml").write_text("<properties><java.version>17</java.version></properties>")
        assert derive_version_file(temp_dir) is VersionFileOutcome.WRITTEN
        assert (temp_dir / ".java-version").read_text() == "17\n"

    def test_submodule_pom(self, temp_dir):
        (temp_dir / "pom.xml").write_text("<project><modules><module>core</module></modules></project>")
        (temp_dir / "core").mkdir()
        (temp_dir / "core" / "pom.xml").write_text("<properties><java.version>21</java.version></properties>")
        assert derive_version_file(temp_dir) is VersionFileOutcome.WRITTEN
        assert (temp_dir / ".java-version").read_text() == "21\n"

    def test_never_overwrites(self, temp_dir):
        (temp_dir / "pom.xml").write_text("<properties><java.version>17</java.version></properties>")
        (temp_dir / ".java-version").write_text("11\n")
        assert derive_version_file(temp_dir) is VersionFileOutcome.SKIPPED
        assert (temp_dir / ".java-version").read_text() == "11\n"

    def test_no_pom(self, temp_dir):
        assert derive_version_file(temp_dir) is VersionFileOutcome.SKIPPED

    def test_non_numeric_version_rejected(self, temp_dir):
        (temp_dir / "pom.xml").write_text("<properties><java.version>${jdk}</java.version></properties>")
        assert derive_version_file(temp_dir) is VersionFileOutcome.SKIPPED
        assert not (temp_dir / ".java-version").exists()
