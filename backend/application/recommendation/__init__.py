from application.recommendation.recommendation_service import RecommendationService, default_policy

__all__ = ["RecommendationService", "default_policy"]
