"""
Tests for the marketplace assistant, run against a scripted LLM.
"""

import json
from datetime import datetime

import pytest

from timber_market.models import (
    ActionType,
    AIFailure,
    AlternativeProduct,
    CategorySuggestion,
    Company,
    CostEstimate,
    DemandItem,
    DemandStatus,
    LoadingPlan,
    MonthlyPlatformSummary,
    Outcome,
    ProductComparison,
    StockItem,
    StockStatus,
    UserRole,
)
from timber_market.services import BaseLLMService, MarketplaceAssistant
from timber_market.utils import AuditLogger

POSTS = {"diameter_type": "mid", "diameter_from": 14, "diameter_to": 18, "length": 4, "quantity": 175}


class FakeLLMService(BaseLLMService):
    """Returns queued replies and records every prompt."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.prompts = []
        self.json_modes = []

    def generate(self, prompt, json_mode=False):
        self.prompts.append(prompt)
        self.json_modes.append(json_mode)
        reply = self.replies.pop(0) if self.replies else ""
        if isinstance(reply, Exception):
            raise reply
        return reply

    @property
    def provider_name(self):
        return "fake"

    @property
    def model_name(self):
        return "fake-model"


class TestCustomerFeatures:
    """Demand form and demand list helpers."""

    @pytest.fixture(autouse=True)
    def setup(self, db_manager):
        self.db_manager = db_manager

    def assistant(self, *replies):
        self.llm = FakeLLMService(*replies)
        return MarketplaceAssistant(self.llm, db_manager=self.db_manager)

    def test_alternative_products(self):
        reply = json.dumps([
            {"name": "Spruce post", "specs": "14-18 cm, 4 m, debarked"},
            {"name": "Pine post", "specs": "12-16 cm, 4 m"},
        ])
        result = self.assistant(reply).suggest_alternative_products(POSTS)

        assert [alt.name for alt in result] == ["Spruce post", "Pine post"]
        assert self.llm.json_modes == [True]
        assert "Diameter: 14.0-18.0 cm" in self.llm.prompts[0]
        assert "in English" in self.llm.prompts[0]

    def test_missing_fields_fail_before_calling_model(self):
        assistant = self.assistant("unused")
        result = assistant.suggest_alternative_products({"diameter_type": "mid", "length": 4})

        assert isinstance(result, AIFailure)
        assert self.llm.prompts == []
        assert isinstance(assistant.suggest_demand_comment({}), AIFailure)
        assert isinstance(assistant.suggest_price({"diameter_from": 10}), AIFailure)

    def test_unparseable_reply(self):
        result = self.assistant("Here are some ideas: oak, beech").suggest_alternative_products(POSTS)

        assert isinstance(result, AIFailure)
        assert result.raw_response.startswith("Here are some ideas")

    def test_compare_products(self):
        reply = json.dumps({
            "original": {"name": "Requested", "pros": ["Exact size"], "cons": []},
            "alternative": {"name": "Spruce post", "pros": ["Cheaper"], "cons": ["Softer wood"]},
        })
        alternative = AlternativeProduct(name="Spruce post", specs="14-18 cm")
        result = self.assistant(reply).compare_products(POSTS, alternative)

        assert isinstance(result, ProductComparison)
        assert result.alternative.cons == ["Softer wood"]
        assert '"Spruce post"' in self.llm.prompts[0]

    def test_compare_without_alternative(self):
        assert isinstance(self.assistant().compare_products(POSTS, None), AIFailure)

    def test_demand_comment(self):
        result = self.assistant("  Please deliver debarked posts.\n").suggest_demand_comment(POSTS)
        assert result == "Please deliver debarked posts."

    def test_explain_demand_status(self):
        demand = DemandItem(**POSTS, status=DemandStatus.PROCESSING)
        result = self.assistant("Your demand is being matched.").explain_demand_status(demand)

        assert result == "Your demand is being matched."
        assert '"processing"' in self.llm.prompts[0]

    def test_similar_stock_only_sends_available_items(self):
        available = StockItem(**POSTS, notes="n" * 300)
        sold = StockItem(**POSTS, status=StockStatus.SOLD)
        reply = json.dumps([{"stock_item_id": available.id, "reason": "Same size", "similarity_score": 0.9}])

        result = self.assistant(reply).suggest_similar_stock(DemandItem(**POSTS), [available, sold])

        assert result[0].stock_item_id == available.id
        assert available.id in self.llm.prompts[0]
        assert sold.id not in self.llm.prompts[0]
        assert "n" * 101 not in self.llm.prompts[0]

    def test_similar_stock_without_available_items(self):
        sold = StockItem(**POSTS, status=StockStatus.SOLD)
        result = self.assistant("unused").suggest_similar_stock(DemandItem(**POSTS), [sold])

        assert isinstance(result, AIFailure)
        assert self.llm.prompts == []


class TestAdminFeatures:
    """Matchmaking, disputes, stock tips and truck planning."""

    @pytest.fixture(autouse=True)
    def setup(self, db_manager):
        self.db_manager = db_manager

    def assistant(self, *replies):
        self.llm = FakeLLMService(*replies)
        return MarketplaceAssistant(self.llm, db_manager=self.db_manager)

    def test_suggest_matches(self):
        demand = DemandItem(**POSTS)
        stock = StockItem(**POSTS)
        reply = json.dumps([{
            "demand_id": demand.id,
            "stock_id": stock.id,
            "reason": "Identical dimensions",
            "match_strength": "High",
            "similarity_score": 95,
        }])
        result = self.assistant(reply).suggest_matches([demand], [stock])

        assert len(result) == 1
        assert result[0].demand_id == demand.id
        assert result[0].similarity_score == 0.95

    def test_matches_only_consider_candidates(self):
        demands = [DemandItem(**POSTS, status=DemandStatus.COMPLETED), DemandItem(**POSTS)]
        stock = [StockItem(**POSTS, status=StockStatus.RESERVED), StockItem(**POSTS)]
        self.assistant("[]").suggest_matches(demands, stock)

        prompt = self.llm.prompts[0]
        assert demands[0].id not in prompt and demands[1].id in prompt
        assert stock[0].id not in prompt and stock[1].id in prompt

    def test_matches_capped_per_prompt(self):
        demands = [DemandItem(**POSTS) for _ in range(35)]
        stock = [StockItem(**POSTS) for _ in range(32)]
        self.assistant("[]").suggest_matches(demands, stock)

        prompt = self.llm.prompts[0]
        assert "top 30 active items" in prompt
        assert "top 30 available items" in prompt
        assert demands[30].id not in prompt

    def test_no_pairing_candidates(self):
        result = self.assistant("unused").suggest_matches(
            [DemandItem(**POSTS, status=DemandStatus.CANCELLED)], [StockItem(**POSTS)]
        )
        assert isinstance(result, AIFailure)
        assert "no pairing candidates" in result.message
        assert self.llm.prompts == []

    def test_dispute_resolutions(self):
        reply = "Suggestions:\n- Mediate between the parties\n- Get an independent moisture test\n"
        result = self.assistant(reply).suggest_dispute_resolutions("Delivered logs were wetter than agreed.")

        assert result == ["Mediate between the parties", "Get an independent moisture test"]

    def test_dispute_details_too_short(self):
        result = self.assistant("unused").suggest_dispute_resolutions("wet logs")

        assert isinstance(result, AIFailure)
        assert self.llm.prompts == []

    def test_dispute_reply_without_list(self):
        result = self.assistant("I cannot assist with that.").suggest_dispute_resolutions("x" * 20)

        assert isinstance(result, AIFailure)
        assert result.raw_response == "I cannot assist with that."

    def test_stock_optimization_tips(self):
        result = self.assistant("- Review stock weekly\n- Sell slow movers first").suggest_stock_optimization_tips()
        assert result == ["Review stock weekly", "Sell slow movers first"]

    def test_plan_truck_load(self):
        reply = json.dumps({
            "plan_details": "Two customers, one manufacturer",
            "items": [{"name": "Posts for Customer X", "volume_m3": 8, "drop_off_order": 1}],
            "capacity_used": "64%",
            "waypoints": [
                {"name": "Customer X", "type": "'dropoff'", "order": 1},
                {"name": "Manufacturer A", "type": "'pickup'", "order": 0},
            ],
        })
        result = self.assistant(reply).plan_truck_load()

        assert isinstance(result, LoadingPlan)
        assert result.items[0].volume_m3 == "8"
        assert [w.type for w in result.ordered_waypoints()] == ["pickup", "dropoff"]
        assert self.llm.json_modes == [True]

    def test_plan_truck_load_from_demands(self):
        demand = DemandItem(**POSTS, submitted_by_company_name="ProBuild Zrt.")
        self.assistant('{"plan_details": "One drop"}').plan_truck_load(demands=[demand])

        assert "ProBuild Zrt." in self.llm.prompts[0]
        assert demand.id in self.llm.prompts[0]

    def test_plan_truck_load_invalid_capacity(self):
        assert isinstance(self.assistant().plan_truck_load(capacity_m3=0), AIFailure)


class TestManufacturerFeatures:
    """Stock form helpers."""

    @pytest.fixture(autouse=True)
    def setup(self, db_manager):
        self.db_manager = db_manager

    def assistant(self, *replies):
        self.llm = FakeLLMService(*replies)
        return MarketplaceAssistant(self.llm, db_manager=self.db_manager)

    def test_suggest_price(self):
        reply = "Suggested price: 110 EUR/m³\nJustification: Debarked acacia is in demand."
        result = self.assistant(reply).suggest_price(POSTS, sustainability_info="PEFC")

        assert result.startswith("Suggested price: 110 EUR/m³")
        assert "PEFC" in self.llm.prompts[0]
        assert "14.074 m³" in self.llm.prompts[0]

    def test_analyze_listing(self):
        reply = (
            "Completeness: Dimensions are complete.\n"
            "Quality and appeal: Mention the wood species.\n"
            "Target audience: Vineyards and fencing firms."
        )
        stock = StockItem(**POSTS, price="95 EUR/m³")
        result = self.assistant(reply).analyze_listing(stock)

        assert [section.label for section in result] == [
            "Completeness:", "Quality and appeal:", "Target audience:"
        ]
        assert result[1].content == "Mention the wood species."

    def test_analyze_listing_from_form_data(self):
        result = self.assistant("Completeness: Fine.").analyze_listing({"notes": "Acacia fence posts"})
        assert result[0].content == "Fine."

    def test_analyze_listing_needs_data(self):
        result = self.assistant("unused").analyze_listing({"notes": "oak", "diameter_type": "mid"})

        assert isinstance(result, AIFailure)
        assert self.llm.prompts == []

    def test_analyze_listing_without_sections(self):
        result = self.assistant("Looks good to me!").analyze_listing(StockItem(**POSTS))
        assert isinstance(result, AIFailure)

    def test_sustainability_report(self):
        reply = " FSC certification is a strong point.\n"
        result = self.assistant(reply).write_sustainability_report(
            {"notes": "Acacia posts"}, sustainability_info="FSC certified forest"
        )

        assert result == "FSC certification is a strong point."
        assert "Sustainability information: FSC certified forest." in self.llm.prompts[0]
        assert "Other notes: Acacia posts." in self.llm.prompts[0]

    def test_sustainability_report_from_dimensions_only(self):
        result = self.assistant("Not enough data.").write_sustainability_report(POSTS)

        assert result == "Not enough data."
        assert "diameter 14.0-18.0 cm" in self.llm.prompts[0]

    def test_sustainability_report_needs_data(self):
        result = self.assistant("unused").write_sustainability_report({"notes": "oak"}, sustainability_info="  ")

        assert isinstance(result, AIFailure)
        assert result.feature == "sustainability report"
        assert self.llm.prompts == []

    def test_marketing_text(self):
        result = self.assistant("Sturdy acacia posts for every vineyard.").write_marketing_text(
            POSTS, price="95 EUR/m³", sustainability_info="PEFC"
        )

        assert result == "Sturdy acacia posts for every vineyard."
        assert "- Price: 95 EUR/m³" in self.llm.prompts[0]
        assert "- Sustainability info: PEFC" in self.llm.prompts[0]

    def test_marketing_text_needs_dimensions(self):
        result = self.assistant("unused").write_marketing_text({"notes": "Beautiful acacia posts"})

        assert isinstance(result, AIFailure)
        assert self.llm.prompts == []


class TestAdminStockAndUsers:
    """Stock categorisation, partner communication and user activity."""

    @pytest.fixture(autouse=True)
    def setup(self, db_manager):
        self.db_manager = db_manager

    def assistant(self, *replies):
        self.llm = FakeLLMService(*replies)
        return MarketplaceAssistant(self.llm, db_manager=self.db_manager)

    def test_suggest_categories(self):
        reply = "Construction Wood > Structural Timber > Spruce Log\n\n- Raw Wood Material > Softwood\n"
        result = self.assistant(reply).suggest_categories("Spruce logs, 4 m, for sawmills")

        assert all(isinstance(c, CategorySuggestion) for c in result)
        assert result[0].path == ["Construction Wood", "Structural Timber", "Spruce Log"]
        assert str(result[1]) == "Raw Wood Material > Softwood"
        assert '"Spruce logs, 4 m, for sawmills"' in self.llm.prompts[0]

    def test_category_description_too_short(self):
        result = self.assistant("unused").suggest_categories("spruce")

        assert isinstance(result, AIFailure)
        assert self.llm.prompts == []

    def test_category_reply_without_categories(self):
        result = self.assistant(">\n > ").suggest_categories("Spruce logs for sawmills")
        assert isinstance(result, AIFailure)

    def test_assess_sustainability(self):
        result = self.assistant("Medium compliance; ask for FSC papers.").assess_sustainability(
            "Oak beams from a managed forest"
        )
        assert result == "Medium compliance; ask for FSC papers."
        assert isinstance(self.assistant().assess_sustainability(None), AIFailure)

    def test_analyze_stock_item(self):
        reply = (
            "**Summary:** 175 acacia posts, ready to ship.\n"
            "**Market relevance:** Vineyards need posts in spring.\n"
            "**Pricing note:** Slightly above average.\n"
            "**Potential customers:** Vineyards, fencing contractors."
        )
        stock = StockItem(**POSTS, price="95 EUR/m³", uploaded_by_company_name="Forest King")
        result = self.assistant(reply).analyze_stock_item(stock)

        assert [section.label for section in result] == [
            "Summary:", "Market relevance:", "Pricing note:", "Potential customers:"
        ]
        assert result[2].content == "Slightly above average."
        assert stock.id in self.llm.prompts[0]
        assert "- Uploading company: Forest King" in self.llm.prompts[0]

    def test_analyze_stock_item_without_sections(self):
        result = self.assistant("A fine item.").analyze_stock_item(StockItem(**POSTS))
        assert isinstance(result, AIFailure)

    def test_draft_communication(self):
        result = self.assistant("Dear [Partner Name], ...").draft_communication(
            "Manufacturer", "Delivery delayed by two days"
        )

        assert result == "Dear [Partner Name], ..."
        assert "Recipient type: Manufacturer" in self.llm.prompts[0]
        assert "Scenario/purpose: Delivery delayed by two days" in self.llm.prompts[0]

    def test_draft_communication_needs_both_fields(self):
        assistant = self.assistant("unused")

        assert isinstance(assistant.draft_communication("Customer", " "), AIFailure)
        assert isinstance(assistant.draft_communication(None, "Invoice reminder"), AIFailure)
        assert self.llm.prompts == []

    def test_check_content_policy(self):
        result = self.assistant("Compliant.").check_content_policy("Best oak in Europe, guaranteed!")

        assert result == "Compliant."
        assert '"Best oak in Europe, guaranteed!"' in self.llm.prompts[0]
        assert isinstance(self.assistant().check_content_policy(""), AIFailure)

    def test_analyze_user_activity(self):
        alpha = Company(id="comp-a", company_name="Alpha Build", role=UserRole.CUSTOMER)
        forest = Company(id="comp-m", company_name="Forest King", role=UserRole.MANUFACTURER)
        demands = [DemandItem(**POSTS, submitted_by_company_id="comp-a", submission_date=datetime(2024, 6, 3))]
        reply = (
            "1. **Most active users:** Alpha Build submitted a demand on 2024-06-03.\n"
            "2. **Inactive users:** Forest King has no stock listed.\n\n"
        )
        result = self.assistant(reply).analyze_user_activity([alpha, forest], demands, [])

        assert result == [
            "Most active users: Alpha Build submitted a demand on 2024-06-03.",
            "Inactive users: Forest King has no stock listed.",
        ]
        prompt = self.llm.prompts[0]
        assert '"company_name": "Alpha Build"' in prompt
        assert '"last_activity": "2024-06-03"' in prompt
        assert "4. Potential misuse:" in prompt

    def test_user_activity_without_companies(self):
        result = self.assistant("unused").analyze_user_activity([], [DemandItem(**POSTS)], [])

        assert isinstance(result, AIFailure)
        assert self.llm.prompts == []


class TestAdminLogisticsAndReports:
    """Shipping templates, monthly reports and transport costs."""

    @pytest.fixture(autouse=True)
    def setup(self, db_manager):
        self.db_manager = db_manager

    def assistant(self, *replies):
        self.llm = FakeLLMService(*replies)
        return MarketplaceAssistant(self.llm, db_manager=self.db_manager)

    def test_shipping_email(self):
        result = self.assistant("Dear [Partner Name],\nYour order [Order Number] ships on [Date].\n").draft_shipping_email()

        assert result.startswith("Dear [Partner Name]")
        assert "[Partner Name], [Order Number], [Date], [Time]" in self.llm.prompts[0]

    def test_waybill_checks(self):
        result = self.assistant("- Check the licence plate\n- Compare volumes with the invoice").suggest_waybill_checks()
        assert result == ["Check the licence plate", "Compare volumes with the invoice"]

    def test_waybill_reply_without_list(self):
        result = self.assistant("Always be careful.").suggest_waybill_checks()

        assert isinstance(result, AIFailure)
        assert result.feature == "waybill checks"

    def test_monthly_summary_uses_counted_figures(self):
        demands = [
            DemandItem(**POSTS, submission_date=datetime(2024, 6, 3), status=DemandStatus.COMPLETED),
            DemandItem(**POSTS, submission_date=datetime(2024, 6, 20)),
            DemandItem(**POSTS, submission_date=datetime(2024, 5, 20)),
        ]
        stock = [StockItem(**POSTS, upload_date=datetime(2024, 6, 1))]
        reply = json.dumps({"ai_interpretation": "Demand is picking up.", "new_demands": 999})

        result = self.assistant(reply).summarize_month(demands, stock, year=2024, month=6)

        assert isinstance(result, MonthlyPlatformSummary)
        assert result.month == "June 2024"
        assert result.new_demands == 2
        assert result.new_stock_items == 1
        assert result.successful_matches == 1
        assert result.ai_interpretation == "Demand is picking up."
        assert "New customer demands: 2" in self.llm.prompts[0]
        assert self.llm.json_modes == [True]

    def test_monthly_summary_without_interpretation(self):
        result = self.assistant('{"summary": "ok"}').summarize_month([], [], year=2024, month=6)

        assert isinstance(result, AIFailure)
        assert result.raw_response == '{"summary": "ok"}'

    def test_monthly_summary_invalid_month(self):
        result = self.assistant("unused").summarize_month([], [], year=2024, month=13)

        assert isinstance(result, AIFailure)
        assert self.llm.prompts == []

    def test_logistics_cost(self):
        reply = json.dumps({"total_cost": 500, "factors": ["Fuel price", "Road tolls"]})
        result = self.assistant(reply).estimate_logistics_cost()

        assert isinstance(result, CostEstimate)
        assert result.total_cost == "500"
        assert result.factors == ["Fuel price", "Road tolls"]
        assert result.id.startswith("cost-")
        assert "approx. 300 km domestic transport within Hungary" in self.llm.prompts[0]
        assert self.llm.json_modes == [True]

    def test_logistics_cost_custom_route(self):
        self.assistant('{"total_cost": "900-1000 EUR"}').estimate_logistics_cost(
            distance_km=620, load_description="half load of oak beams", region="Austria"
        )
        assert "approx. 620 km domestic transport within Austria, for a half load of oak beams" in self.llm.prompts[0]

    def test_logistics_cost_invalid_input(self):
        assistant = self.assistant("unused")

        assert isinstance(assistant.estimate_logistics_cost(distance_km=0), AIFailure)
        assert isinstance(assistant.estimate_logistics_cost(load_description=" "), AIFailure)
        assert self.llm.prompts == []

    def test_logistics_cost_wrong_shape(self):
        result = self.assistant('{"factors": ["Fuel"]}').estimate_logistics_cost()
        assert isinstance(result, AIFailure)

    def test_freight_optimization_tips(self):
        result = self.assistant("- Fill return trips\n- Bundle small orders").suggest_freight_optimization_tips()
        assert result == ["Fill return trips", "Bundle small orders"]


class TestFailureHandling:
    """Backend errors never escape the assistant."""

    @pytest.fixture(autouse=True)
    def setup(self, db_manager):
        self.db_manager = db_manager

    def test_backend_exception_becomes_failure(self):
        llm = FakeLLMService(RuntimeError("quota exceeded"))
        result = MarketplaceAssistant(llm, db_manager=self.db_manager).suggest_stock_optimization_tips()

        assert isinstance(result, AIFailure)
        assert result.feature == "stock optimization tips"

    def test_empty_reply_becomes_failure(self):
        llm = FakeLLMService("   ")
        result = MarketplaceAssistant(llm, db_manager=self.db_manager).suggest_demand_comment(POSTS)
        assert isinstance(result, AIFailure)

    def test_missing_api_key_becomes_failure(self):
        result = MarketplaceAssistant(db_manager=self.db_manager).suggest_stock_optimization_tips()

        assert isinstance(result, AIFailure)
        assert "not available" in result.message

    def test_requests_are_audited(self):
        llm = FakeLLMService("- Tip one", RuntimeError("boom"))
        assistant = MarketplaceAssistant(llm, db_manager=self.db_manager)
        assistant.suggest_stock_optimization_tips()
        assistant.suggest_stock_optimization_tips()

        entries = [e for e in AuditLogger(self.db_manager).get_recent_entries() if e.action_type == ActionType.AI_REQUEST]
        assert sorted(e.outcome for e in entries) == [Outcome.FAILURE, Outcome.SUCCESS]
        assert all(e.details == {"feature": "stock optimization tips"} for e in entries)

    def test_hungarian_prompts(self, isolated_environment):
        isolated_environment.set("market.locale", "hu")
        llm = FakeLLMService("- Tipp")
        MarketplaceAssistant(llm, db_manager=self.db_manager).suggest_stock_optimization_tips()

        assert "in Hungarian" in llm.prompts[0]
