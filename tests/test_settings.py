import pytest

from schaufel.settings import (
    ConfigError,
    Options,
    get_member,
    is_list,
    load,
    lookup,
    lookup_int,
    lookup_string,
    parse,
)

KAFKA = (
    "consumers=({"
    'type="kafka";'
    "threads=1;"
    'groupid="test.group";'
    'topic="test.topic:0,2-5,7";'
    'broker="test-broker";'
    "});"
)


def test_parse_consumer_list():
    root = parse(KAFKA)
    assert lookup(root, "consumers.[0].type") == "kafka"
    assert lookup(root, "consumers.[0].threads") == 1
    assert lookup(root, "consumers.[0].topic") == "test.topic:0,2-5,7"
    assert lookup(root, "consumers.[0].broker") == "test-broker"


def test_slash_and_colon_paths():
    root = parse('logger: { type = "file"; file = "foobar"; };')
    assert lookup(root, "logger/type") == "file"
    assert lookup(root, "logger:file") == "foobar"


def test_lists_arrays_and_groups():
    root = parse('a = (1, "x", { b = 2; }); c = [1, 2, 3]; g = {};')
    assert isinstance(root["a"], list)
    assert root["c"] == (1, 2, 3)
    assert root["g"] == {}
    assert lookup(root, "a.[2].b") == 2
    assert lookup(root, "c.[1]") == 2


def test_empty_list_and_trailing_comma():
    root = parse("hooks = (); more = (1, 2,);")
    assert root["hooks"] == []
    assert root["more"] == [1, 2]


def test_scalars():
    root = parse('h = 0x1F; f = 1.5; t = TRUE; n = false; big = 12L; neg = -3;')
    assert root["h"] == 0x1F
    assert root["f"] == 1.5
    assert root["t"] is True
    assert root["n"] is False
    assert root["big"] == 12
    assert root["neg"] == -3


def test_strings_concatenate_and_unescape():
    root = parse('s = "ab" "cd"; t = "a\\"b\\n";')
    assert root["s"] == "abcd"
    assert root["t"] == 'a"b\n'


def test_comments_are_ignored():
    root = parse('# hash\n// slashes\n/* block\n comment */ x = 1; // tail\n')
    assert root == {"x": 1}


def test_syntax_error_reports_line():
    with pytest.raises(ConfigError) as info:
        parse("a = 1;\nb = ;")
    assert info.value.line == 2


def test_duplicate_name_rejected():
    with pytest.raises(ConfigError):
        parse("a = 1; a = 2;")


def test_unterminated_group_rejected():
    with pytest.raises(ConfigError):
        parse("a = { b = 1;")


def test_mixed_array_rejected():
    with pytest.raises(ConfigError):
        parse('a = [1, "x"];')


def test_lookup_missing_parts():
    root = parse(KAFKA)
    assert lookup(root, "producers") is None
    assert lookup(root, "consumers.[5]") is None
    assert lookup(root, "consumers.[0].threads.deeper") is None


def test_lookup_string_and_int():
    root = parse(KAFKA)
    consumer = lookup(root, "consumers.[0]")
    assert lookup_string(consumer, "broker", "need broker") == "test-broker"
    assert lookup_int(consumer, "threads", "need threads") == 1
    with pytest.raises(ConfigError, match="need host"):
        lookup_string(consumer, "host", "need host")
    with pytest.raises(ConfigError, match="not an int"):
        lookup_int(consumer, "type", "not an int")


def test_lookup_int_rejects_bool():
    with pytest.raises(ConfigError):
        lookup_int(parse("x = true;"), "x", "need int")


def test_get_member_and_is_list():
    root = parse("postadd = (); queue = {};")
    assert get_member(root, "postadd", "missing") == []
    assert is_list(root["postadd"], "must be a list") is True
    with pytest.raises(ConfigError, match="missing"):
        get_member(root, "preget", "missing")
    with pytest.raises(ConfigError, match="must be a list"):
        is_list(root["queue"], "must be a list")


def test_load_round_trip(tmp_path):
    path = tmp_path / "schaufel.conf"
    path.write_text(KAFKA, encoding="utf-8")
    assert load(path) == parse(KAFKA)


def test_load_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        load(tmp_path / "absent.conf")


def test_options_defaults_are_independent():
    first, second = Options(), Options()
    first.in_hosts.append("localhost:5432")
    assert second.in_hosts == []
    assert first.consumer_threads == 0
    assert first.config is None