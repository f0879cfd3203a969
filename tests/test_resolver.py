import pytest

from mavenrepo.api.resolver import RepositoryRequest, RequestKind, is_metadata_name, resolve_path, split_path


def test_split_path_ignores_extra_slashes():
    assert split_path("/com//example/app/") == ["com", "example", "app"]
    assert split_path("") == []
    assert split_path(None) == []


def test_root_lists_groups():
    assert resolve_path("").kind is RequestKind.LIST_GROUPS
    assert resolve_path("/").kind is RequestKind.LIST_GROUPS


def test_stylesheet():
    req = resolve_path("style.css")

    assert req.kind is RequestKind.STYLESHEET
    assert req.path == "style.css"


def test_group_and_artifact_listings():
    assert resolve_path("com.example") == RepositoryRequest(RequestKind.LIST_ARTIFACTS, group_id="com.example")
    assert resolve_path("com.example/app/") == RepositoryRequest(
        RequestKind.LIST_VERSIONS, group_id="com.example", artifact_id="app"
    )


def test_three_segments_show_a_version():
    req = resolve_path("com.example/app/2.1")

    assert req.kind is RequestKind.SHOW_VERSION
    assert (req.group_id, req.artifact_id, req.version) == ("com.example", "app", "2.1")
    assert req.path == "com.example/app/2.1"


@pytest.mark.parametrize("name", ["maven-metadata.xml", "maven-metadata.xml.md5", "maven-metadata.xml.sha1"])
def test_three_segment_metadata_is_artifact_level(name):
    req = resolve_path(f"com.example/app/{name}")

    assert req.kind is RequestKind.GROUP_METADATA
    assert (req.group_id, req.artifact_id, req.file_name) == ("com.example", "app", name)


def test_dotted_and_slashed_groups_resolve_identically():
    dotted = resolve_path("com.example/app/2.1/app-2.1.war")
    slashed = resolve_path("com/example/app/2.1/app-2.1.war")

    assert dotted == slashed
    assert slashed.kind is RequestKind.FILE
    assert slashed.group_id == "com.example"
    assert slashed.directory == "com.example/app/2.1"
    assert slashed.path == "com.example/app/2.1/app-2.1.war"


def test_deep_groups_collapse_into_one_dotted_group():
    req = resolve_path("org/apache/maven/plugins/maven-jar-plugin/3.3.0/maven-jar-plugin-3.3.0.pom")

    assert req.group_id == "org.apache.maven.plugins"
    assert req.artifact_id == "maven-jar-plugin"
    assert req.version == "3.3.0"


def test_test_variant_is_flagged():
    assert resolve_path("g/a/1/a-1-tests.jar").is_test
    assert resolve_path("g/a/1/a-1-tests.jar.sha1").is_test
    assert not resolve_path("g/a/1/a-1.jar").is_test


def test_metadata_without_version_oracle():
    four = resolve_path("com/example/app/2.1/maven-metadata.xml")
    five = resolve_path("org/acme/tools/app/maven-metadata.xml.sha1")

    assert four.kind is RequestKind.FILE
    assert four.version == "2.1"
    assert five.kind is RequestKind.GROUP_METADATA
    assert (five.group_id, five.artifact_id) == ("org.acme.tools", "app")


def test_metadata_with_version_oracle():
    known = {("com.example", "app", "2.1")}

    def knows_version(group_id, artifact_id, version):
        return (group_id, artifact_id, version) in known

    version_level = resolve_path("com/example/app/2.1/maven-metadata.xml", knows_version)
    artifact_level = resolve_path("com/example/app/maven-metadata.xml", knows_version)

    assert version_level.kind is RequestKind.FILE
    assert version_level.group_id == "com.example"
    assert artifact_level.kind is RequestKind.GROUP_METADATA
    assert (artifact_level.group_id, artifact_level.artifact_id) == ("com.example", "app")

    deep_group = resolve_path("org/acme/tools/app/1.0/maven-metadata.xml", lambda g, a, v: g == "org.acme.tools")
    assert deep_group.kind is RequestKind.FILE
    assert (deep_group.group_id, deep_group.version) == ("org.acme.tools", "1.0")


def test_oracle_is_not_consulted_for_regular_files():
    def explode(*args):
        raise AssertionError("oracle consulted")

    assert resolve_path("com/example/app/2.1/app-2.1.jar", explode).kind is RequestKind.FILE


def test_is_metadata_name():
    assert is_metadata_name("maven-metadata.xml.md5")
    assert not is_metadata_name("maven-metadata.xml.sha256")
    assert not is_metadata_name("app-1.0.pom")
