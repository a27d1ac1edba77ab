from ourpeople.graph import KinshipGraph
from ourpeople.nametag import format_nametag, summarize
from ourpeople.schemas import Person, Relationship
from ourpeople.store import EntityStore


def make_family():
    store = EntityStore()
    graph = KinshipGraph()
    people = {
        "joe": ("Joe", "male"),
        "jo": ("Josephine", "female"),
        "pat": ("Pat", None),
        "karen": ("Karen", "female"),
        "amy": ("Amy", "female"),
        "abby": ("Abby", "female"),
        "josh": ("Josh", "male"),
        "ed": ("Ed", "male"),
        "fred": ("Fred", "male"),
    }
    for person_id, (name, gender) in people.items():
        store.put_person(Person(id=person_id, name=name, gender=gender))
        graph.add_person(person_id)
    facts = [
        ("jo", "parent", "joe"),
        ("joe", "spouse", "pat"),
        ("joe", "parent", "karen"),
        ("amy", "child", "joe"),
        ("karen", "parent", "abby"),
        ("amy", "parent", "josh"),
        ("joe", "sibling", "ed"),
        ("joe", "friend", "fred"),
    ]
    for idx, (a, rel_type, b) in enumerate(facts):
        relationship = Relationship(id=f"r{idx}", person_a_id=a, person_b_id=b, type=rel_type)
        store.put_relationship(relationship)
        graph.add_edge(relationship)
    return store, graph


def test_summary_lines_in_fixed_order():
    store, graph = make_family()
    lines = summarize(store, graph, "joe")
    assert [(line.label, line.names) for line in lines] == [
        ("Husband of", ["Pat"]),
        ("Father of", ["Karen", "Amy"]),
        ("Grandpa to", ["Abby", "Josh"]),
        ("Son of", ["Josephine"]),
        ("Brother of", ["Ed"]),
    ]


def test_friends_are_left_off_the_nametag():
    store, graph = make_family()
    names = [name for line in summarize(store, graph, "joe") for name in line.names]
    assert "Fred" not in names
    assert summarize(store, graph, "fred") == []


def test_neutral_labels_without_gender():
    store, graph = make_family()
    lines = summarize(store, graph, "pat")
    assert [(line.label, line.names) for line in lines] == [("Married to", ["Joe"])]


def test_grandparent_line_for_female_subject():
    store, graph = make_family()
    lines = summarize(store, graph, "jo")
    assert [line.label for line in lines] == ["Mother of", "Grandma to"]
    assert lines[1].names == ["Karen", "Amy"]


def test_unknown_person_has_no_lines():
    store, graph = make_family()
    assert summarize(store, graph, "nobody") == []


def test_format_nametag():
    store, graph = make_family()
    text = format_nametag("Joe", summarize(store, graph, "joe"))
    assert text.startswith("I'm Joe - Husband of Pat; Father of Karen, Amy; Grandpa to Abby, Josh")
    assert format_nametag("Fred", []) == "I'm Fred"
