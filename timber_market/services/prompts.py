"""
Prompt builders for the marketplace assistant.

Every builder takes the reply language ("English" or "Hungarian") and returns
the full prompt text. JSON replies are requested with snake_case keys so they
validate directly against the response models.
"""

import json
from typing import Any, Dict, List, Optional, Sequence

from ..analytics import CompanyActivity, MonthlyActivity
from ..models import AlternativeProduct, DemandItem, ProductFeatures, StockItem

LISTING_ANALYSIS_LABELS = ("Completeness:", "Quality and appeal:", "Target audience:")
STOCK_ANALYSIS_LABELS = ("Summary:", "Market relevance:", "Pricing note:", "Potential customers:")
USER_ACTIVITY_CATEGORIES = ("Most active users:", "Inactive users:", "Unusual listings:", "Potential misuse:")
SHIPPING_EMAIL_PLACEHOLDERS = ("[Partner Name]", "[Order Number]", "[Date]", "[Time]")

DEFAULT_TRUCK_PRODUCT = "Acacia debarked, sanded post"
DEFAULT_TRUCK_CAPACITY_M3 = 25.0
DEFAULT_COST_DISTANCE_KM = 300.0
DEFAULT_COST_LOAD = "full truckload (24 tons) of spruce logs"
DEFAULT_COST_REGION = "Hungary"


def _features_block(features: ProductFeatures, include_notes: bool = True) -> str:
    lines = [
        f"- Diameter type: {features.diameter_type}",
        f"- Diameter: {features.diameter_from}-{features.diameter_to} cm",
        f"- Length: {features.length} m",
        f"- Quantity: {features.quantity} pcs",
    ]
    if include_notes and features.notes:
        lines.append(f"- Notes: {features.notes}")
    return "\n".join(lines)


def _json_block(records: Sequence[Dict[str, Any]]) -> str:
    return json.dumps(list(records), indent=2, ensure_ascii=False)


def alternative_products_prompt(features: ProductFeatures, language: str) -> str:
    return f"""A customer is looking for alternatives to the following timber on an online timber marketplace. Provide 2-3 specific alternative product suggestions in {language}, in JSON format. Each suggestion should include a "name" (product name) and "specs" (short description, e.g. dimensions, quality).
Original demand:
{_features_block(features)}

The response should only contain the JSON array, [{{"name": "...", "specs": "..."}}, ...], without any extra text or markdown. Output in {language}."""


def product_comparison_prompt(
    features: ProductFeatures,
    alternative: AlternativeProduct,
    language: str,
) -> str:
    notes = features.notes or "No other notes."
    return f"""A customer requests a product comparison between the following two timber items. Provide the comparison in {language}, in JSON format.
The JSON object should contain an "original" and an "alternative" key. Under each, include the following fields: "name" (string), "dimensions_quantity_notes" (string, summarizing dimensions, quantity, notes), "pros" (string array, advantages from the customer's perspective) and "cons" (string array, disadvantages from the customer's perspective).

Original demand:
- Product name: "Requested product"
- Dimensions/quantity/notes: "{features.describe()}. {notes}"

Alternative:
- Product name: "{alternative.name}"
- Dimensions/quantity/notes: "{alternative.specs}"

The response should only contain the JSON object, without any extra text or markdown. Output in {language}."""


def demand_comment_prompt(features: ProductFeatures, language: str) -> str:
    return f"""A customer is looking for timber on an online marketplace. Based on the following data, generate a short, polite and informative note in {language} that the customer can attach to their demand. The note should highlight quality expectations or intended use if inferable from the data. Maximum 2-3 sentences.

Product features:
{_features_block(features, include_notes=False)}

The response should only contain the generated note text, without any extra formatting or prefix/suffix. Output in {language}."""


def demand_status_prompt(demand: DemandItem, language: str) -> str:
    submitted = demand.submission_date.strftime("%Y-%m-%d")
    status = demand.status.value
    return f"""A customer wants a more detailed, friendly explanation of their timber demand status in {language}.
Demand details:
- ID: {demand.id}
- Product: {demand.describe()}
- Submitted: {submitted}
- Current status: "{status}"

Task: Provide a 2-3 sentence general explanation of what the "{status}" status might mean in practice in timber trading, and what the next likely step in processing might be. Avoid specific promises or delivery times. The response should only contain the explanation text, without any extra formatting or prefix/suffix. Respond in {language}."""


def similar_stock_prompt(
    demand: DemandItem,
    stock_data: Sequence[Dict[str, Any]],
    language: str,
) -> str:
    return f"""A customer on a timber trading platform has the following demand. Find 1-3 similar or alternative available stock items from the provided list.
For each suggestion, provide "stock_item_id", a "reason" (why it's a good match or alternative, considering dimensions, quantity, price, notes), "match_strength" (e.g. "High", "Medium", "Low", or a percentage like "85%") and "similarity_score" (number, 0.0-1.0).
Respond in JSON format as an array of objects in {language}.

Customer demand:
- ID: {demand.id}
{_features_block(demand, include_notes=False)}
- Notes: {demand.notes or 'N/A'}

Available stock (top {len(stock_data)} items):
{_json_block(stock_data)}

The response MUST ONLY contain the JSON array."""


def matchmaking_prompt(
    demand_data: Sequence[Dict[str, Any]],
    stock_data: Sequence[Dict[str, Any]],
    language: str,
) -> str:
    return f"""You are an assistant for a timber trading platform.
Based on the following active customer demands and available manufacturer stock, identify the most promising pairings.
Provide your response as a JSON array in {language}. Each object represents a pairing and has the fields:
- "demand_id": string (ID of the demand)
- "stock_id": string (ID of the stock item)
- "reason": string (a justification in {language} for why the pairing is good. Consider:
    - matching dimensions (diameter, length) and quantities;
    - niche items or potentially slow-moving stock;
    - if quantities differ significantly, EXPLICITLY MENTION THE POSSIBILITY OF CONSOLIDATION, e.g. "The manufacturer's stock could satisfy multiple smaller demands.";
    - notes on the demand and the stock that align.
  )
- "match_strength": string (e.g. "High", "Medium", "Low", or a percentage like "85%")
- "similarity_score": number (0.0 to 1.0, e.g. 0.9 for a very strong match, 0.5 for a moderate one)

The response MUST ONLY contain the JSON array.

Customer demands (top {len(demand_data)} active items):
{_json_block(demand_data)}

Manufacturer stock (top {len(stock_data)} available items):
{_json_block(stock_data)}
"""


def dispute_resolution_prompt(details: str, language: str) -> str:
    return f"""An admin of an online timber marketplace requests dispute resolution suggestions. For the following dispute, provide at least 2-3 specific, practical resolution suggestions in {language} to help the parties reach an agreement.
Provide your response as a list, with each suggestion on a new line preceded by '- ' (hyphen and space). Do not include any introduction, summary or other explanation outside the list.

Dispute details:
{details}

Example of the desired format (only lines starting with a hyphen):
- Initiate direct negotiation between the parties with a mediator.
- Obtain an independent expert opinion on the disputed issue (e.g. quality, quantity).
- Offer partial compensation or a discount for quicker resolution."""


def stock_optimization_prompt(language: str) -> str:
    return (
        f"For an admin of an online timber marketplace, generate general stock optimization tips in {language}. "
        "The tips should be practical, focus on efficient stock management and on avoiding overproduction "
        "or shortages, and may touch on Just-In-Time principles. Provide 3-5 tips. Your response should be "
        "a list, with each tip on a new line preceded by '- ' (hyphen and space). "
        "The response should contain nothing else but this list."
    )


def price_suggestion_prompt(
    features: ProductFeatures,
    language: str,
    sustainability_info: Optional[str] = None,
) -> str:
    extra = []
    if sustainability_info:
        extra.append(f"- Sustainability information: {sustainability_info}")
    if features.notes:
        extra.append(f"- Notes/other description (e.g. wood species, quality): {features.notes}")
    extra_block = ("\n" + "\n".join(extra)) if extra else ""

    return f"""On a timber trading platform, a manufacturer requests a price suggestion for their product. Provide a specific price suggestion in EUR/m³ or EUR/pcs, in {language}. Consider the given features, sustainability information (if any) and current market trends in the timber industry.
Product features:
{_features_block(features, include_notes=False)}
- Calculated total volume: {features.cubic_meters:.3f} m³{extra_block}

Your response should be in this format, in {language}:
Suggested price: [price] EUR/[unit, e.g. m³ or pcs]
Justification: [short, 1-2 sentence justification addressing quality, demand or other relevant factors]
The response should only contain the suggested price and justification text."""


def listing_analysis_prompt(
    stock: StockItem,
    language: str,
    labels: Sequence[str] = LISTING_ANALYSIS_LABELS,
) -> str:
    completeness, appeal, audience = labels
    diameter = (
        f"{stock.diameter_from}-{stock.diameter_to} cm"
        if stock.diameter_from is not None and stock.diameter_to is not None
        else "Not specified"
    )
    return f"""Analyze the following timber product listing for an online marketplace. Provide feedback on its completeness, suggestions to improve quality and appeal, and identify the potential target audience.
Provide your response in {language}. Start each part on a new line with the specified labels (use these exact labels, in English):
{completeness} [your feedback on completeness]
{appeal} [your suggestions for improving quality and appeal]
{audience} [the potential target audience]

The response should only contain the analysis lines, without any extra text or markdown.

Product data:
- Diameter type: {stock.diameter_type or 'Not specified'}
- Diameter: {diameter}
- Length: {f'{stock.length} m' if stock.length is not None else 'Not specified'}
- Quantity: {f'{stock.quantity} pcs' if stock.quantity is not None else 'Not specified'}
- Price: {stock.price or 'Not specified'}
- Sustainability information: {stock.sustainability_info or 'Not specified'}
- Notes/description: {stock.notes or 'Not specified'}
"""


def truck_load_prompt(
    language: str,
    product_name: str = DEFAULT_TRUCK_PRODUCT,
    capacity_m3: float = DEFAULT_TRUCK_CAPACITY_M3,
    orders: Optional[List[Dict[str, Any]]] = None,
) -> str:
    if orders:
        order_block = (
            "Consolidate the following customer orders onto one truck. Use the given company names "
            "as drop-off destinations and generate realistic manufacturer names for the pickups.\n"
            f"Orders:\n{_json_block(orders)}"
        )
    else:
        order_block = (
            "The transport task involves consolidating partial orders from 2-3 simulated customers onto one "
            "truck, picked up from 2-3 simulated manufacturers. Generate realistic company names "
            '(e.g. "Forest King Timber Kft.", "ProBuild Construction Zrt.").'
        )

    return f"""An admin of a timber company requests an optimal loading and transport plan for a {capacity_m3:g} m³ (approx. 24-ton, 13.5 m flatbed) truck in {language}.
The product to be transported is exclusively "{product_name}".
Products are transported in crates of approx. 1.2 m x 1.2 m base. The number of pieces per crate depends on length and diameter (e.g. about 25 pieces of 4 m, 14-18 cm mid-diameter posts fit in a crate, so 175 pieces is approx. 7 crates).
{order_block}

The response MUST be a JSON object in {language} with the fields:
- "plan_details": string (brief description of the plan)
- "items": array of objects, one per customer shipment, each with:
    - "name": string (e.g. "{product_name} - for Customer X Ltd., 3 crates")
    - "volume_m3": string (e.g. "8")
    - "destination_name": string (customer drop-off location)
    - "drop_off_order": number (1 for the first drop-off)
    - "loading_suggestion": string (loading advice considering last-in-first-out for the drop-off order)
    - "quality": string (optional)
    - "notes_on_item": string (optional)
- "capacity_used": string (truck capacity utilisation, e.g. "92%")
- "waypoints": array of objects listing every pickup and drop-off in route order, each with:
    - "name": string (company name and site)
    - "type": "pickup" or "dropoff"
    - "order": number (position in the route, starting at 0)
- "optimized_route_description": string (short description of the route)

The response must ONLY contain the JSON object. No other text or markdown is allowed."""


def sustainability_report_prompt(
    features: ProductFeatures,
    language: str,
    sustainability_info: Optional[str] = None,
) -> str:
    description = (
        f"The product is: {features.diameter_type or 'N/A'}, diameter "
        f"{features.diameter_from or 'N/A'}-{features.diameter_to or 'N/A'} cm, "
        f"length {features.length or 'N/A'} m, {features.quantity or 'N/A'} pcs."
    )
    if sustainability_info:
        description += f" Sustainability information: {sustainability_info}."
    if features.notes:
        description += f" Other notes: {features.notes}."

    return (
        f"A sustainability report in {language} is requested for a timber product ({description}). "
        "Create a short, 2-4 sentence summary report. The report should assess potential sustainability "
        "aspects based on the product description and sustainability info. If there are signs of "
        "certifications (e.g. FSC, PEFC), mention them as positives. If information seems lacking, indicate "
        "what further data (e.g. forest management certificates, harvesting methods) could refine the "
        "assessment. The response should only contain the generated report text, without any extra "
        "formatting or prefix/suffix."
    )


def marketing_text_prompt(
    features: ProductFeatures,
    language: str,
    price: Optional[str] = None,
    sustainability_info: Optional[str] = None,
) -> str:
    extra = []
    if price:
        extra.append(f"- Price: {price}")
    if sustainability_info:
        extra.append(f"- Sustainability info: {sustainability_info}")
    if features.notes:
        extra.append(f"- Notes/description: {features.notes}")
    extra_block = ("\n" + "\n".join(extra)) if extra else ""

    return f"""Write a short, catchy and professional marketing text in {language} for the following timber:
{_features_block(features, include_notes=False)}{extra_block}

The text should be concise, highlight the main benefits of the product and address potential customers (e.g. construction companies, furniture manufacturers). Avoid exaggerations; remain informative and trustworthy. The response should only contain the generated marketing text, without any extra formatting or prefix/suffix."""


def category_suggestion_prompt(description: str, language: str) -> str:
    return f"""An admin of an online timber marketplace requests a product categorization suggestion. Based on the following product description, provide 1-2 relevant, hierarchical category suggestions in {language}. The categories should be specific to the timber industry. Use '>' to denote hierarchy.
Example: "Construction Wood > Structural Timber > Spruce Log" or "Raw Wood Material > Softwood > Logs for Processing".
The response should only contain the suggested categories, each on a new line. No other text should be included.

Product description:
"{description}\""""


def sustainability_assessment_prompt(description: str, language: str) -> str:
    return f"""An admin of an online timber marketplace requests a sustainability assessment based on a product description. Based on the following description and sustainability information, provide a short assessment in {language}. Address the level of sustainability compliance the product seems to meet (e.g. basic, medium, high). Suggest what further information (e.g. certificates, details of harvesting methods) might be needed for a more accurate classification. The response should be a single paragraph. No other text should be included.

Product description and sustainability information:
"{description}\""""


def stock_item_analysis_prompt(
    stock: StockItem,
    language: str,
    labels: Sequence[str] = STOCK_ANALYSIS_LABELS,
) -> str:
    details = [
        f"- ID: {stock.id}",
        f"- Product: {stock.describe()}",
        f"- Uploaded: {stock.upload_date.strftime('%Y-%m-%d')}",
        f'- Status: "{stock.status.value}"',
        f"- Price: {stock.price or 'Not specified'}",
    ]
    if stock.uploaded_by_company_name:
        details.append(f"- Uploading company: {stock.uploaded_by_company_name}")
    if stock.sustainability_info:
        details.append(f"- Sustainability information: {stock.sustainability_info}")
    if stock.notes:
        details.append(f"- Manufacturer's note: {stock.notes}")
    headings = "\n".join(labels)
    detail_block = "\n".join(details)

    return f"""An admin of an online timber marketplace requests an analysis of a specific stock item in {language}.
Stock item details:
{detail_block}

Task: Provide a structured analysis in {language}. Start each part on a new line with the following headings (use these exact headings, in English) and give 1-2 sentences of content for each:
{headings}

The response should only contain the requested structured analysis."""


def communication_draft_prompt(recipient_type: str, scenario: str, language: str) -> str:
    return f"""Generate a professional and polite communication draft in {language}.
Recipient type: {recipient_type}
Scenario/purpose: {scenario}
The draft should be suitable for a timber trading platform.
Include placeholders like {', '.join(SHIPPING_EMAIL_PLACEHOLDERS)} if relevant to the scenario.
The response should only contain the generated draft text, without any extra formatting or prefix/suffix."""


def content_policy_prompt(content: str, language: str) -> str:
    return f"""Check the following text for compliance with general content policies appropriate for a business platform (timber trading).
Text to check: "{content}"
Provide a brief assessment in {language}, highlighting any potential issues (e.g. misleading claims, unprofessional language) or confirming compliance. Suggest improvements if necessary.
The response should only contain the assessment text, without any extra formatting or prefix/suffix."""


def user_activity_prompt(
    activity: Sequence[CompanyActivity],
    language: str,
    categories: Sequence[str] = USER_ACTIVITY_CATEGORIES,
) -> str:
    records = [
        {
            "company_id": row.company_id,
            "company_name": row.company_name,
            "role": row.role,
            "demands": row.demands,
            "stock_items": row.stock_items,
            "volume_m3": row.volume_m3,
            "last_activity": row.last_activity.strftime("%Y-%m-%d") if row.last_activity else None,
        }
        for row in activity
    ]
    category_block = "\n".join(f"{index}. {name}" for index, name in enumerate(categories, start=1))

    return f"""For an admin of an online timber marketplace, generate an analysis of user activities in {language}, based on the listing activity of the registered companies below. Identify examples in the following categories and refer to the companies by name or ID:
{category_block}

Unusual listings are listings that stand out by volume or frequency; potential misuse covers suspicious patterns such as a sudden large number of listings from one company.

Company activity:
{_json_block(records)}

The response should only contain the list, with each item on a new line, starting with the category name (in English, as given above). No extra text or markdown outside the list itself."""


def shipping_email_prompt(language: str) -> str:
    placeholders = ", ".join(SHIPPING_EMAIL_PLACEHOLDERS)
    return (
        f"Create a professional, polite and informative email draft in {language} for a shipping notification. "
        f"The email should include the following placeholders for the user to fill in later: {placeholders}. "
        "The purpose of the email is to inform the partner about shipping details and request confirmation "
        "of receipt. The response should only contain the full email text, without any extra introduction "
        "or explanation."
    )


def waybill_checks_prompt(language: str) -> str:
    return (
        "An admin of a timber company requests waybill check suggestions. Provide 3-4 specific, practical "
        f"tips or checkpoints in {language} that are important when checking data on a waybill for timber "
        "transport to ensure accuracy and compliance. Your response should be a list, with each suggestion "
        "on a new line preceded by '- ' (hyphen and space). The response should contain nothing else but "
        "this list."
    )


def monthly_summary_prompt(activity: MonthlyActivity, language: str) -> str:
    return f"""Generate a concise monthly platform summary for a timber trading platform for {activity.label} in {language}.
Platform figures for the month:
- New customer demands: {activity.new_demands} ({activity.demanded_volume_m3} m³)
- New stock items: {activity.new_stock_items} ({activity.listed_volume_m3} m³)
- Successful matches (completed demands): {activity.successful_matches}

The response MUST be a JSON object with a single field "ai_interpretation": string (a brief 2-3 sentence analysis of these numbers with potential suggestions, in {language}).
The response must only contain the JSON object, without any extra text or markdown."""


def logistics_cost_prompt(
    language: str,
    distance_km: float = DEFAULT_COST_DISTANCE_KM,
    load_description: str = DEFAULT_COST_LOAD,
    region: str = DEFAULT_COST_REGION,
) -> str:
    return f"""An admin of a timber company requests a logistics cost estimation for an approx. {distance_km:g} km domestic transport within {region}, for a {load_description}.
Provide an estimation in JSON format, in {language}, in EUR, with the following fields: "total_cost" (the total estimated cost, e.g. "450-550 EUR") and "factors" (an array of the main cost factors, e.g. ["Fuel price", "Road tolls", "Driver's wages", "Loading time", "Administrative costs"]).
The response should only contain the JSON object, without any extra text or markdown."""


def freight_optimization_prompt(language: str) -> str:
    return (
        "An admin of a timber company requests freight optimization tips. Provide 3-5 specific, practical "
        f"tips in {language} for optimizing timber transport. The tips should be in a list, each tip on a "
        "new line preceded by '- ' (hyphen and space). The response should contain nothing else."
    )
