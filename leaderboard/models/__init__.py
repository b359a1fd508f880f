from leaderboard.models.ai_score import AIScore
from leaderboard.models.challenge import Challenge
from leaderboard.models.criteria import RecruiterCriteria
from leaderboard.models.final_ranking import FinalRanking
from leaderboard.models.user import User

__all__ = ["AIScore", "Challenge", "FinalRanking", "RecruiterCriteria", "User"]
