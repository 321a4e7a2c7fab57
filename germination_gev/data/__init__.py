from germination_gev.data.loader import load_observations, observations_from_frame

__all__ = ["load_observations", "observations_from_frame"]
