class LeaderboardError(Exception):
    """Base de los errores que abortan un refresh completo."""

class ConfigurationError(LeaderboardError): ...
class RosterUnavailable(LeaderboardError): ...
class RefreshFailure(LeaderboardError): ...
