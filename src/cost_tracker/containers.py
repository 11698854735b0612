"""Dependency container wiring for the application."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from cost_tracker.adapters.supabase_completed_food_repository import (
    SupabaseCompletedFoodRepository,
)
from cost_tracker.adapters.supabase_dish_repository import SupabaseDishRepository
from cost_tracker.adapters.supabase_ingredient_repository import (
    SupabaseIngredientRepository,
)
from cost_tracker.config import Settings, parse_count_units
from cost_tracker.services.comparison import CandidateComparator
from cost_tracker.services.dishes import DishService
from cost_tracker.services.events import EventHub
from cost_tracker.services.foods import CompletedFoodService
from cost_tracker.services.ingredients import IngredientService
from cost_tracker.services.reports import ReportService

_logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    events: EventHub
    ingredient_service: IngredientService
    dish_service: DishService
    food_service: CompletedFoodService
    comparator: CandidateComparator
    report_service: ReportService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    ingredient_repository = SupabaseIngredientRepository(supabase_client)
    dish_repository = SupabaseDishRepository(supabase_client)
    food_repository = SupabaseCompletedFoodRepository(supabase_client)
    events = EventHub()
    ingredient_service = IngredientService(ingredient_repository, events)
    dish_service = DishService(dish_repository, ingredient_repository, events)
    food_service = CompletedFoodService(food_repository, dish_repository, events)
    comparator = CandidateComparator(
        ingredient_service, parse_count_units(resolved_settings.count_units)
    )
    report_service = ReportService(ingredient_service, dish_service, food_service)

    async def close_resources() -> None:
        _logger.info("Closing cost tracker resources")

    return AppContainer(
        settings=resolved_settings,
        events=events,
        ingredient_service=ingredient_service,
        dish_service=dish_service,
        food_service=food_service,
        comparator=comparator,
        report_service=report_service,
        close_resources=close_resources,
    )
