from ask_ah_mah.recipes import extract_recipe_block, normalize_tags

REPLY = """Wah, you got eggs and rice, can make this one lah!

## Egg Fried Rice

**Ingredients:**
- 2 eggs
- 1 bowl leftover rice 🛒

**Instructions:**
1. Beat the eggs 🍳
2. Fry the rice on high heat 🔥

---

Want to try with substitutes or not?"""


def test_extract_recipe_block_stops_at_rule():
    name, block = extract_recipe_block(REPLY)

    assert name == "Egg Fried Rice"
    assert block.startswith("## Egg Fried Rice")
    assert block.endswith("2. Fry the rice on high heat 🔥")
    assert "Wah" not in block
    assert "substitutes" not in block


def test_extract_recipe_block_stops_at_next_recipe():
    text = "## Kaya Toast\nToast the bread.\n## Kopi\nBrew strong."
    assert extract_recipe_block(text) == ("Kaya Toast", "## Kaya Toast\nToast the bread.")


def test_extract_recipe_block_keeps_subheadings():
    text = "## Bak Kut Teh\n### The broth\n1. Boil water\n### The meat\n1. Blanch ribs"
    name, block = extract_recipe_block(text)
    assert name == "Bak Kut Teh"
    assert "### The meat" in block


def test_extract_recipe_block_strips_bold_name():
    assert extract_recipe_block("## **Laksa**\nSpicy")[0] == "Laksa"


def test_extract_recipe_block_without_heading():
    assert extract_recipe_block("Just boil the noodles lor.") is None
    assert extract_recipe_block("") is None


def test_normalize_tags():
    assert normalize_tags([" Quick ", "quick", "Local  Favourite", "", "Breakfast"]) == [
        "quick",
        "local favourite",
        "breakfast",
    ]
    assert normalize_tags(None) == []
