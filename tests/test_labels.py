from ourpeople.labels import LONGEST_CHAIN, SHORTCUT_LABELS, relationship_word, resolve, title_for


def test_gendered_chain_labels():
    assert resolve(["parent", "parent"], "female") == "grandma"
    assert resolve(["parent", "sibling"], "male") == "uncle"
    assert resolve(("child", "spouse"), "female") == "daughter-in-law"


def test_neutral_label_without_gender():
    assert resolve(["parent", "parent"]) == "grandparent"
    assert resolve(["parent", "sibling"], None) == "aunt/uncle"
    assert resolve(["child", "child"]) == "grandchild"


def test_ungendered_entries_ignore_gender():
    assert resolve(["parent", "sibling", "child"], "female") == "cousin"
    assert resolve(["friend"], "male") == "friend"


def test_exact_chain_matching_only():
    assert resolve(["parent"] * 5) is None
    assert resolve(["sibling", "parent"]) is None
    assert resolve([]) is None
    assert LONGEST_CHAIN == 3


def test_step_parent_pattern_is_kept():
    assert resolve(["parent", "spouse"], "male") == "step-dad"
    assert resolve(["parent", "spouse", "child"]) == "step-sibling"


def test_table_is_keyed_by_tuples():
    assert all(isinstance(chain, tuple) for chain in SHORTCUT_LABELS)


def test_relationship_words():
    assert relationship_word("parent", "female") == "mom"
    assert relationship_word("sibling", "male") == "brother"
    assert relationship_word("spouse") == "spouse"


def test_titles():
    assert title_for("aunt") == "Aunt"
    assert title_for("grandpa") == "Grandpa"
    assert title_for("sister") is None
    assert title_for(None) is None
