"""
Marketplace assistant.

Generative-AI helpers for customers, manufacturers and administrators. Every
feature returns its result or an AIFailure; none of them raise. Missing form
data is reported before any model call is made.
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError

from ..analytics import company_activity, monthly_activity
from ..config import ConfigManager, get_config_manager
from ..models import (
    ActionType,
    Actor,
    AIFailure,
    AlternativeProduct,
    CategorySuggestion,
    Company,
    CostEstimate,
    DemandItem,
    DemandStatus,
    LabeledSection,
    LoadingPlan,
    MatchmakingSuggestion,
    MonthlyPlatformSummary,
    Outcome,
    ProductComparison,
    ProductFeatures,
    StockItem,
    StockStatus,
    StockSuggestion,
    as_features,
)
from ..utils import AuditLogger, get_logger
from ..utils.response_parser import (
    extract_labeled_sections,
    failure,
    parse_bullet_list,
    parse_json_payload,
    parse_lines,
    parse_model,
    parse_model_list,
)
from . import prompts
from .base_llm_service import BaseLLMService
from .llm_factory import create_llm_service

MIN_DISPUTE_DETAILS_LENGTH = 10
MIN_LISTING_TEXT_LENGTH = 5
MIN_DESCRIPTION_LENGTH = 10

FeaturesInput = Union[ProductFeatures, Mapping[str, Any]]


def _has_listing_content(product: ProductFeatures, *texts: Optional[str]) -> bool:
    """A few words of description, or the diameter type, range and length."""
    if any(len((text or "").strip()) >= MIN_LISTING_TEXT_LENGTH for text in texts):
        return True
    return bool(
        product.diameter_type
        and product.diameter_from is not None
        and product.diameter_to is not None
        and product.length is not None
    )


class MarketplaceAssistant:
    """AI features of the marketplace, backed by an LLM service."""

    def __init__(
        self,
        llm_service: Optional[BaseLLMService] = None,
        db_manager=None,
        config: Optional[ConfigManager] = None,
    ):
        """
        Initialize the assistant.

        Args:
            llm_service: LLM backend; created from configuration on first use if None
            db_manager: Database manager for the audit trail (optional)
            config: Configuration manager (defaults to the global one)
        """
        self.config = config or get_config_manager()
        self._llm_service = llm_service
        self.logger = get_logger("marketplace_assistant")
        self.audit_logger = AuditLogger(db_manager)

    # Settings

    @property
    def language(self) -> str:
        return self.config.prompt_language()

    @property
    def max_items(self) -> int:
        return self.config.market_settings().max_items_per_prompt

    @property
    def notes_length(self) -> int:
        return self.config.market_settings().notes_excerpt_length

    @property
    def excerpt_length(self) -> int:
        return self.config.market_settings().raw_response_excerpt_length

    # Plumbing

    def _llm(self) -> BaseLLMService:
        if self._llm_service is None:
            self._llm_service = create_llm_service(config=self.config)
        return self._llm_service

    def _fail(self, feature: str, message: str, raw_response: Optional[str] = None) -> AIFailure:
        self.logger.warning(f"{feature}: {message}")
        return failure(feature, message, raw_response, self.excerpt_length)

    def _audit(self, feature: str, outcome: Outcome, error: Optional[str] = None, record_id=None) -> None:
        self.audit_logger.log_action(
            action_type=ActionType.AI_REQUEST,
            actor=Actor.LLM,
            details={"feature": feature},
            outcome=outcome,
            record_id=record_id,
            error_message=error,
        )

    def _ask(
        self,
        feature: str,
        prompt: str,
        json_mode: bool = False,
        record_id: Optional[str] = None,
    ) -> Union[str, AIFailure]:
        """Send a prompt; backend errors and empty replies become AIFailure."""
        try:
            llm = self._llm()
        except Exception as e:
            self.logger.error(f"AI assistant unavailable: {e}")
            self._audit(feature, Outcome.FAILURE, str(e), record_id)
            return failure(feature, f"The AI assistant is not available: {e}")

        try:
            text = llm.generate(prompt, json_mode=json_mode)
        except Exception as e:
            self.logger.error(f"AI request for {feature} failed: {e}")
            self._audit(feature, Outcome.FAILURE, str(e), record_id)
            return failure(feature, f"The AI request for {feature} failed. Please try again later.")

        if not text or not text.strip():
            self._audit(feature, Outcome.FAILURE, "empty response", record_id)
            return self._fail(feature, "The AI returned an empty response.")

        self._audit(feature, Outcome.SUCCESS, record_id=record_id)
        return text

    def _read_features(self, feature: str, features: Optional[FeaturesInput]) -> Union[ProductFeatures, AIFailure]:
        if features is None:
            return self._fail(feature, "No product features were given.")
        try:
            return as_features(features)
        except ValidationError as e:
            return self._fail(feature, f"The product features are invalid: {e.error_count()} error(s).")

    def _require_dimensions(self, feature: str, features: Optional[FeaturesInput]) -> Union[ProductFeatures, AIFailure]:
        product = self._read_features(feature, features)
        if isinstance(product, AIFailure):
            return product
        if not product.has_dimensions():
            return self._fail(
                feature,
                "Provide the diameter type, diameter range, length and quantity first.",
            )
        return product

    def _cut(self, text: Optional[str]) -> Optional[str]:
        if text is None:
            return None
        return text[:self.notes_length]

    def _prompt_record(self, item: Union[DemandItem, StockItem]) -> Dict[str, Any]:
        """Compact listing data sent to the model."""
        record = {
            "id": item.id,
            "diameter_type": item.diameter_type,
            "diameter_from": item.diameter_from,
            "diameter_to": item.diameter_to,
            "length": item.length,
            "quantity": item.quantity,
            "cubic_meters": item.cubic_meters,
            "notes": self._cut(item.notes),
        }
        if isinstance(item, StockItem):
            record["price"] = item.price
            record["sustainability_info"] = self._cut(item.sustainability_info)
            record["uploaded_by_company_name"] = item.uploaded_by_company_name
        else:
            record["submitted_by_company_name"] = item.submitted_by_company_name
        return record

    def _read_stock(self, feature: str, stock) -> Union[StockItem, AIFailure]:
        if isinstance(stock, StockItem):
            return stock
        try:
            return StockItem.model_validate(dict(stock or {}))
        except ValidationError as e:
            return self._fail(feature, f"The listing data is invalid: {e.error_count()} error(s).")

    def _answer(self, feature: str, prompt: str, record_id: Optional[str] = None) -> Union[str, AIFailure]:
        """Free-text reply, trimmed."""
        text = self._ask(feature, prompt, record_id=record_id)
        if isinstance(text, AIFailure):
            return text
        return text.strip()

    def _bullets(self, feature: str, prompt: str, what: str) -> Union[List[str], AIFailure]:
        """Items of a "- item" reply; a reply without any is a failure."""
        text = self._ask(feature, prompt)
        if isinstance(text, AIFailure):
            return text
        items = parse_bullet_list(text)
        if not items:
            return self._fail(feature, f"Could not read any {what} from the AI response.", text)
        return items

    def _description(self, feature: str, description: Optional[str]) -> Union[str, AIFailure]:
        description = (description or "").strip()
        if len(description) < MIN_DESCRIPTION_LENGTH:
            return self._fail(
                feature,
                f"Describe the product in at least {MIN_DESCRIPTION_LENGTH} characters.",
            )
        return description

    # Customer features

    def suggest_alternative_products(
        self, features: FeaturesInput
    ) -> Union[List[AlternativeProduct], AIFailure]:
        """Suggest 2-3 products the customer could order instead."""
        feature = "alternative products"
        product = self._require_dimensions(feature, features)
        if isinstance(product, AIFailure):
            return product

        text = self._ask(feature, prompts.alternative_products_prompt(product, self.language), json_mode=True)
        if isinstance(text, AIFailure):
            return text
        return parse_model_list(text, AlternativeProduct, feature, self.excerpt_length)

    def compare_products(
        self,
        features: FeaturesInput,
        alternative: Optional[Union[AlternativeProduct, Mapping[str, Any]]],
    ) -> Union[ProductComparison, AIFailure]:
        """Compare the requested product with one alternative, with pros and cons."""
        feature = "product comparison"
        if alternative is None:
            return self._fail(feature, "There is no alternative product to compare with.")
        product = self._read_features(feature, features)
        if isinstance(product, AIFailure):
            return product
        if not isinstance(alternative, AlternativeProduct):
            try:
                alternative = AlternativeProduct.model_validate(dict(alternative))
            except ValidationError:
                return self._fail(feature, "The alternative product has no name.")

        text = self._ask(
            feature,
            prompts.product_comparison_prompt(product, alternative, self.language),
            json_mode=True,
        )
        if isinstance(text, AIFailure):
            return text
        return parse_model(text, ProductComparison, feature, self.excerpt_length)

    def suggest_demand_comment(self, features: FeaturesInput) -> Union[str, AIFailure]:
        """Draft a short note the customer can attach to a demand."""
        feature = "demand comment"
        product = self._require_dimensions(feature, features)
        if isinstance(product, AIFailure):
            return product

        text = self._ask(feature, prompts.demand_comment_prompt(product, self.language))
        if isinstance(text, AIFailure):
            return text
        return text.strip()

    def explain_demand_status(self, demand: DemandItem) -> Union[str, AIFailure]:
        """Explain in plain words what a demand's status means."""
        feature = "demand status explanation"
        text = self._ask(
            feature, prompts.demand_status_prompt(demand, self.language), record_id=demand.id
        )
        if isinstance(text, AIFailure):
            return text
        return text.strip()

    def suggest_similar_stock(
        self,
        demand: DemandItem,
        stock: Iterable[StockItem],
    ) -> Union[List[StockSuggestion], AIFailure]:
        """Pick 1-3 available stock items that fit a demand."""
        feature = "similar stock"
        available = [s for s in stock or [] if s.status == StockStatus.AVAILABLE]
        if not available:
            return self._fail(feature, "There is no available stock to suggest from.")

        stock_data = [self._prompt_record(s) for s in available[:self.max_items]]
        text = self._ask(
            feature,
            prompts.similar_stock_prompt(demand, stock_data, self.language),
            json_mode=True,
            record_id=demand.id,
        )
        if isinstance(text, AIFailure):
            return text
        return parse_model_list(text, StockSuggestion, feature, self.excerpt_length)

    # Admin features

    def suggest_matches(
        self,
        demands: Iterable[DemandItem],
        stock: Iterable[StockItem],
    ) -> Union[List[MatchmakingSuggestion], AIFailure]:
        """
        Propose demand/stock pairings.

        Only RECEIVED demands and AVAILABLE stock are considered, at most
        market.max_items_per_prompt of each, with notes shortened to
        market.notes_excerpt_length characters.
        """
        feature = "matchmaking"
        active = [d for d in demands or [] if d.status == DemandStatus.RECEIVED]
        available = [s for s in stock or [] if s.status == StockStatus.AVAILABLE]
        if not active or not available:
            return self._fail(
                feature,
                "There are no pairing candidates: matchmaking needs at least one received "
                "demand and one available stock item.",
            )

        demand_data = [self._prompt_record(d) for d in active[:self.max_items]]
        stock_data = [self._prompt_record(s) for s in available[:self.max_items]]
        self.logger.info(
            f"Requesting pairings for {len(demand_data)} demands and {len(stock_data)} stock items"
        )

        text = self._ask(
            feature,
            prompts.matchmaking_prompt(demand_data, stock_data, self.language),
            json_mode=True,
        )
        if isinstance(text, AIFailure):
            return text
        return parse_model_list(text, MatchmakingSuggestion, feature, self.excerpt_length)

    def suggest_dispute_resolutions(self, details: Optional[str]) -> Union[List[str], AIFailure]:
        """Suggest ways to settle a dispute between trading partners."""
        feature = "dispute resolution"
        details = (details or "").strip()
        if len(details) < MIN_DISPUTE_DETAILS_LENGTH:
            return self._fail(
                feature,
                f"Describe the dispute in at least {MIN_DISPUTE_DETAILS_LENGTH} characters.",
            )

        return self._bullets(
            feature, prompts.dispute_resolution_prompt(details, self.language), "suggestions"
        )

    def suggest_stock_optimization_tips(self) -> Union[List[str], AIFailure]:
        """General stock management tips for administrators."""
        feature = "stock optimization tips"
        return self._bullets(feature, prompts.stock_optimization_prompt(self.language), "tips")

    def suggest_categories(self, description: Optional[str]) -> Union[List[CategorySuggestion], AIFailure]:
        """Suggest 1-2 hierarchical product categories for a description."""
        feature = "category suggestion"
        description = self._description(feature, description)
        if isinstance(description, AIFailure):
            return description

        text = self._ask(feature, prompts.category_suggestion_prompt(description, self.language))
        if isinstance(text, AIFailure):
            return text
        categories = []
        for line in parse_lines(text):
            try:
                categories.append(CategorySuggestion.from_text(line))
            except ValidationError:
                continue
        if not categories:
            return self._fail(feature, "Could not read any categories from the AI response.", text)
        return categories

    def assess_sustainability(self, description: Optional[str]) -> Union[str, AIFailure]:
        """Rate how sustainable a described product seems and what is missing."""
        feature = "sustainability assessment"
        description = self._description(feature, description)
        if isinstance(description, AIFailure):
            return description
        return self._answer(feature, prompts.sustainability_assessment_prompt(description, self.language))

    def analyze_stock_item(
        self, stock: Union[StockItem, Mapping[str, Any]]
    ) -> Union[List[LabeledSection], AIFailure]:
        """Summary, market relevance, pricing and likely buyers of a stock item."""
        feature = "stock item analysis"
        stock = self._read_stock(feature, stock)
        if isinstance(stock, AIFailure):
            return stock

        text = self._ask(
            feature, prompts.stock_item_analysis_prompt(stock, self.language), record_id=stock.id
        )
        if isinstance(text, AIFailure):
            return text
        sections = extract_labeled_sections(text, prompts.STOCK_ANALYSIS_LABELS)
        if not sections:
            return self._fail(feature, "Could not find the analysis sections in the AI response.", text)
        return sections

    def draft_communication(
        self, recipient_type: Optional[str], scenario: Optional[str]
    ) -> Union[str, AIFailure]:
        """Draft a message to a trading partner for the given scenario."""
        feature = "communication draft"
        recipient_type = (recipient_type or "").strip()
        scenario = (scenario or "").strip()
        if not recipient_type or not scenario:
            return self._fail(feature, "Give both the recipient type and the scenario.")
        return self._answer(
            feature, prompts.communication_draft_prompt(recipient_type, scenario, self.language)
        )

    def check_content_policy(self, content: Optional[str]) -> Union[str, AIFailure]:
        """Assess a text for misleading claims or unprofessional language."""
        feature = "content policy check"
        content = (content or "").strip()
        if not content:
            return self._fail(feature, "Enter the text to check.")
        return self._answer(feature, prompts.content_policy_prompt(content, self.language))

    def analyze_user_activity(
        self,
        companies: Iterable[Company],
        demands: Iterable[DemandItem],
        stock: Iterable[StockItem],
    ) -> Union[List[str], AIFailure]:
        """
        Point out the most active, inactive and suspicious companies.

        The model sees each company's listing counts, volume and last
        listing date, at most market.max_items_per_prompt companies.
        """
        feature = "user activity analysis"
        activity = company_activity(companies, demands, stock)
        if not activity:
            return self._fail(feature, "There are no registered companies to analyze.")

        text = self._ask(
            feature,
            prompts.user_activity_prompt(activity[:self.max_items], self.language),
        )
        if isinstance(text, AIFailure):
            return text
        lines = parse_lines(text)
        if not lines:
            return self._fail(feature, "Could not read the activity analysis from the AI response.", text)
        return lines

    def draft_shipping_email(self) -> Union[str, AIFailure]:
        """Shipping notification email with [Partner Name]-style placeholders."""
        feature = "shipping email"
        return self._answer(feature, prompts.shipping_email_prompt(self.language))

    def suggest_waybill_checks(self) -> Union[List[str], AIFailure]:
        """Checkpoints for verifying timber transport waybills."""
        feature = "waybill checks"
        return self._bullets(feature, prompts.waybill_checks_prompt(self.language), "checks")

    def summarize_month(
        self,
        demands: Iterable[DemandItem],
        stock: Iterable[StockItem],
        year: Optional[int] = None,
        month: Optional[int] = None,
    ) -> Union[MonthlyPlatformSummary, AIFailure]:
        """
        Monthly platform figures with the model's interpretation.

        The figures are counted from the given listings (the current month
        by default); only the interpretation comes from the model.
        """
        feature = "monthly summary"
        today = datetime.now()
        year = year or today.year
        month = month or today.month
        if not 1 <= month <= 12:
            return self._fail(feature, "Month must be between 1 and 12.")

        activity = monthly_activity(demands, stock, year, month)
        text = self._ask(feature, prompts.monthly_summary_prompt(activity, self.language), json_mode=True)
        if isinstance(text, AIFailure):
            return text
        data = parse_json_payload(text, feature, self.excerpt_length)
        if isinstance(data, AIFailure):
            return data
        interpretation = data.get("ai_interpretation") if isinstance(data, dict) else None
        if not isinstance(interpretation, str) or not interpretation.strip():
            return self._fail(feature, "The AI response has no interpretation of the figures.", text)

        return MonthlyPlatformSummary(
            month=activity.label,
            new_demands=activity.new_demands,
            new_stock_items=activity.new_stock_items,
            successful_matches=activity.successful_matches,
            ai_interpretation=interpretation.strip(),
        )

    def estimate_logistics_cost(
        self,
        distance_km: float = prompts.DEFAULT_COST_DISTANCE_KM,
        load_description: str = prompts.DEFAULT_COST_LOAD,
        region: str = prompts.DEFAULT_COST_REGION,
    ) -> Union[CostEstimate, AIFailure]:
        """Rough cost of one road shipment, with its main cost factors."""
        feature = "logistics cost estimate"
        if distance_km is None or distance_km <= 0:
            return self._fail(feature, "Distance must be a positive number of kilometres.")
        if not load_description or not load_description.strip():
            return self._fail(feature, "Describe the load to be transported.")

        region = (region or "").strip() or prompts.DEFAULT_COST_REGION
        text = self._ask(
            feature,
            prompts.logistics_cost_prompt(self.language, distance_km, load_description.strip(), region),
            json_mode=True,
        )
        if isinstance(text, AIFailure):
            return text
        return parse_model(text, CostEstimate, feature, self.excerpt_length)

    def suggest_freight_optimization_tips(self) -> Union[List[str], AIFailure]:
        """General tips for cheaper, fuller timber transport."""
        feature = "freight optimization tips"
        return self._bullets(feature, prompts.freight_optimization_prompt(self.language), "tips")

    def plan_truck_load(
        self,
        product_name: str = prompts.DEFAULT_TRUCK_PRODUCT,
        capacity_m3: float = prompts.DEFAULT_TRUCK_CAPACITY_M3,
        demands: Optional[Iterable[DemandItem]] = None,
    ) -> Union[LoadingPlan, AIFailure]:
        """
        Plan a multi-pickup, multi-drop truck load.

        Without demands the model simulates customers and manufacturers;
        with demands, the RECEIVED ones are consolidated onto the truck.
        """
        feature = "truck loading plan"
        if not product_name or not product_name.strip():
            return self._fail(feature, "Name the product to be transported.")
        if capacity_m3 is None or capacity_m3 <= 0:
            return self._fail(feature, "Truck capacity must be a positive volume.")

        orders = None
        if demands is not None:
            active = [d for d in demands if d.status == DemandStatus.RECEIVED]
            if not active:
                return self._fail(feature, "There are no received demands to load.")
            orders = [
                {
                    "demand_id": d.id,
                    "customer": d.submitted_by_company_name or "Unnamed customer",
                    "description": d.describe(),
                    "cubic_meters": d.cubic_meters,
                }
                for d in active[:self.max_items]
            ]

        text = self._ask(
            feature,
            prompts.truck_load_prompt(self.language, product_name.strip(), capacity_m3, orders),
            json_mode=True,
        )
        if isinstance(text, AIFailure):
            return text
        return parse_model(text, LoadingPlan, feature, self.excerpt_length)

    # Manufacturer features

    def suggest_price(
        self,
        features: FeaturesInput,
        sustainability_info: Optional[str] = None,
    ) -> Union[str, AIFailure]:
        """Suggest a price with a short justification."""
        feature = "price suggestion"
        product = self._require_dimensions(feature, features)
        if isinstance(product, AIFailure):
            return product

        text = self._ask(
            feature,
            prompts.price_suggestion_prompt(product, self.language, sustainability_info),
        )
        if isinstance(text, AIFailure):
            return text
        return text.strip()

    def write_sustainability_report(
        self,
        features: FeaturesInput,
        sustainability_info: Optional[str] = None,
    ) -> Union[str, AIFailure]:
        """
        Short sustainability report for a product being listed.

        Needs the same minimum content as a listing analysis.
        """
        feature = "sustainability report"
        product = self._read_features(feature, features)
        if isinstance(product, AIFailure):
            return product
        if not _has_listing_content(product, product.notes, sustainability_info):
            return self._fail(
                feature,
                "Add a description, sustainability information or the product dimensions first.",
            )
        return self._answer(
            feature,
            prompts.sustainability_report_prompt(product, self.language, sustainability_info),
        )

    def write_marketing_text(
        self,
        features: FeaturesInput,
        price: Optional[str] = None,
        sustainability_info: Optional[str] = None,
    ) -> Union[str, AIFailure]:
        """Catchy but factual advertising text for a stock listing."""
        feature = "marketing text"
        product = self._require_dimensions(feature, features)
        if isinstance(product, AIFailure):
            return product
        return self._answer(
            feature,
            prompts.marketing_text_prompt(product, self.language, price, sustainability_info),
        )

    def analyze_listing(
        self, stock: Union[StockItem, Mapping[str, Any]]
    ) -> Union[List[LabeledSection], AIFailure]:
        """
        Review a stock listing for completeness, appeal and target audience.

        The listing needs either a few words of notes or sustainability
        information, or its diameter type, diameter range and length.
        """
        feature = "listing analysis"
        stock = self._read_stock(feature, stock)
        if isinstance(stock, AIFailure):
            return stock
        if not _has_listing_content(stock, stock.notes, stock.sustainability_info):
            return self._fail(
                feature,
                "Add a description, sustainability information or the product dimensions first.",
            )

        text = self._ask(feature, prompts.listing_analysis_prompt(stock, self.language))
        if isinstance(text, AIFailure):
            return text
        sections = extract_labeled_sections(text, prompts.LISTING_ANALYSIS_LABELS)
        if not sections:
            return self._fail(feature, "Could not find the analysis sections in the AI response.", text)
        return sections
