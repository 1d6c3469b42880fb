import unittest

from guildhall.game import rules
from guildhall.game.embeds import (
    build_board_embed,
    build_contract_embed,
    clan_label,
    format_duration,
    outcome_lines,
)
from guildhall.game.utils import format_mapping, parse_resources
from guildhall.models import ConsequencePayload, Contract, Hero, ItemDrop, Outcome, RewardPayload


BANDITS = Contract.model_validate(
    {
        "id": "contract_bandit_attack",
        "name": "Bandit Attack",
        "clan": "red",
        "is_mandatory": True,
        "contract": {
            "category": "combat",
            "difficulty": 2.0,
            "requirements": {"city_level": 2, "hero_stats": {"strength": 10}},
            "rewards": {
                "guaranteed": {"gold": 200},
                "possible": [{"item": "bandit_mask", "quantity": 2, "drop_chance": 0.25}],
            },
        },
    }
)


class FormattingTests(unittest.TestCase):
    def test_format_duration(self):
        self.assertEqual(format_duration(45), "45с")
        self.assertEqual(format_duration(125), "2м 05с")
        self.assertEqual(format_duration(3700), "1ч 01м")
        self.assertEqual(format_duration(-3), "0с")

    def test_clan_label(self):
        self.assertEqual(clan_label("green"), "Зелёный клан")
        self.assertEqual(clan_label(None), "без клана")
        self.assertEqual(clan_label("purple"), "purple")

    def test_parse_resources(self):
        self.assertEqual(parse_resources("gold=100, wood=5; bad, stone=x"), {"gold": 100, "wood": 5})
        self.assertIsNone(parse_resources("   "))
        self.assertIsNone(parse_resources(None))

    def test_format_mapping(self):
        self.assertEqual(format_mapping({"gold": 5, "wood": 2}), "gold 5, wood 2")
        self.assertEqual(format_mapping({}), "—")


class EmbedTests(unittest.TestCase):
    def test_board_embed_marks_mandatory(self):
        embed = build_board_embed([BANDITS])
        self.assertIn("📌 **Bandit Attack**", embed.description)

    def test_empty_board(self):
        self.assertEqual(build_board_embed([]).description, "Сейчас нет доступных контрактов.")

    def test_contract_embed_without_hero(self):
        details = rules.contract_details(None, BANDITS)
        embed = build_contract_embed(BANDITS, details)

        fields = {field.name: field.value for field in embed.fields}
        self.assertEqual(fields["Сложность"], "Hard")
        self.assertEqual(fields["Клан"], "Красный клан")
        self.assertIn("Уровень города: **2**", fields["Требования"])
        self.assertIn("bandit_mask x2 (25%)", fields["Награды"])
        self.assertFalse(any(name.startswith("Прогноз") for name in fields))

    def test_contract_embed_with_hero_forecast(self):
        hero = Hero(id="h1", name="Forest Ranger", clan="green", stats={"strength": 10})
        details = rules.contract_details(hero, BANDITS)
        embed = build_contract_embed(BANDITS, details, hero)

        forecast = next(field for field in embed.fields if field.name == "Прогноз для Forest Ranger")
        self.assertIn("**25%**", forecast.value)
        self.assertIn("30с", forecast.value)


class OutcomeLinesTests(unittest.TestCase):
    def test_success_lines(self):
        outcome = Outcome(
            success=True,
            rewards=RewardPayload(gold=200, items=[ItemDrop(item="bandit_mask", quantity=1)]),
            experience_gained={"strength": 5},
        )
        self.assertEqual(
            outcome_lines(outcome),
            ["🪙 +200 золота", "⭐ Опыт: strength 5", "🎁 bandit_mask x1"],
        )

    def test_death_hides_injury(self):
        outcome = Outcome(
            success=False,
            consequences=ConsequencePayload(death=True, injury=True, resource_loss={"gold": 30}),
        )
        self.assertEqual(outcome_lines(outcome), ["💀 Герой погиб", "📦 Потери: gold 30"])

    def test_empty_outcomes(self):
        self.assertEqual(outcome_lines(Outcome(success=True)), ["Награды нет"])
        self.assertEqual(outcome_lines(Outcome(success=False)), ["Без последствий"])
