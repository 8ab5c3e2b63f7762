"""Tests for extract-block parsing and validation."""

from datetime import date

from aisle.services.extraction import KernelExtraction, parse_reply, validate_extraction


class TestParseReply:
    """Tests for splitting a reply into visible text and extraction."""

    def test_no_block_returns_text_unchanged(self) -> None:
        parsed = parse_reply("Congratulations! When is the big day?")
        assert parsed.reply == "Congratulations! When is the big day?"
        assert parsed.extraction.is_empty
        assert parsed.had_block is False

    def test_well_formed_block_is_removed_and_parsed(self) -> None:
        text = (
            "Emma and James, lovely to meet you. When's the wedding?\n"
            '<extract>{"names": ["Emma", "James"], "weddingDate": "2026-06-14"}</extract>'
        )
        parsed = parse_reply(text)
        assert parsed.reply == "Emma and James, lovely to meet you. When's the wedding?"
        assert parsed.extraction.names == ["Emma", "James"]
        assert parsed.extraction.wedding_date == date(2026, 6, 14)
        assert "<extract>" not in parsed.reply

    def test_malformed_block_is_removed_without_raising(self) -> None:
        parsed = parse_reply('Sounds great.\n<extract>{"names": ["Emma",</extract>')
        assert parsed.reply == "Sounds great."
        assert parsed.extraction.is_empty
        assert parsed.had_block is True

    def test_unterminated_block_is_dropped(self) -> None:
        parsed = parse_reply('Tell me more.\n<extract>{"vibe": ["rustic"]')
        assert parsed.reply == "Tell me more."
        assert parsed.extraction.is_empty

    def test_code_fence_inside_block(self) -> None:
        text = 'Nice.\n<extract>\n```json\n{"guestCount": 120}\n```\n</extract>'
        parsed = parse_reply(text)
        assert parsed.extraction.guest_count == 120

    def test_block_in_middle_of_text(self) -> None:
        parsed = parse_reply('Before. <extract>{"location": "Provo, UT"}</extract> After.')
        assert "Before." in parsed.reply and "After." in parsed.reply
        assert parsed.extraction.location == "Provo, UT"

    def test_multiple_blocks_are_merged(self) -> None:
        text = (
            "Rustic sounds perfect.\n"
            '<extract>{"vibe": ["rustic"], "guestCount": 80}</extract>\n'
            '<extract>{"names": ["A", "B"], "guestCount": 100}</extract>'
        )
        parsed = parse_reply(text)
        assert parsed.reply == "Rustic sounds perfect."
        assert parsed.extraction.vibe == ["rustic"]
        assert parsed.extraction.names == ["A", "B"]
        assert parsed.extraction.guest_count == 100

    def test_bad_block_does_not_discard_good_one(self) -> None:
        parsed = parse_reply('Okay.<extract>{"vibe": </extract><extract>{"location": "Provo, UT"}</extract>')
        assert parsed.reply == "Okay."
        assert parsed.extraction.location == "Provo, UT"

    def test_empty_text(self) -> None:
        parsed = parse_reply("")
        assert parsed.reply == ""
        assert parsed.extraction.is_empty


class TestValidateExtraction:
    """Tests for schema validation of the extracted JSON."""

    def test_non_object_is_empty(self) -> None:
        assert validate_extraction(["Emma"]).is_empty
        assert validate_extraction("names").is_empty

    def test_invalid_field_dropped_others_kept(self) -> None:
        result = validate_extraction({"guestCount": "lots", "vibe": ["rustic"]})
        assert result.guest_count is None
        assert result.vibe == ["rustic"]

    def test_negative_guest_count_dropped(self) -> None:
        assert validate_extraction({"guestCount": -5}).guest_count is None

    def test_unknown_planning_phase_dropped(self) -> None:
        result = validate_extraction({"planningPhase": "panicking", "location": "Austin"})
        assert result.planning_phase is None
        assert result.location == "Austin"

    def test_null_fields_are_not_learned(self) -> None:
        result = validate_extraction({"names": None, "weddingDate": None, "moveToNextStep": False})
        assert result.learned() == {}

    def test_single_string_becomes_list(self) -> None:
        assert validate_extraction({"vibe": "rustic"}).vibe == ["rustic"]

    def test_blank_list_items_dropped(self) -> None:
        assert validate_extraction({"stressors": ["  ", "family", ""]}).stressors == ["family"]

    def test_month_only_date(self) -> None:
        assert validate_extraction({"weddingDate": "2026-06"}).wedding_date == date(2026, 6, 1)

    def test_datetime_string_date(self) -> None:
        assert validate_extraction({"weddingDate": "2026-06-14T00:00:00Z"}).wedding_date == date(2026, 6, 14)

    def test_unknown_keys_ignored(self) -> None:
        assert validate_extraction({"favoriteCake": "lemon"}).is_empty

    def test_snake_case_keys_accepted(self) -> None:
        result = validate_extraction({"budget_total": 3000000})
        assert result.budget_total == 3000000

    def test_move_to_next_step_not_a_fact(self) -> None:
        result = KernelExtraction.model_validate({"moveToNextStep": True, "guestCount": 80})
        assert result.move_to_next_step is True
        assert result.learned() == {"guest_count": 80}
