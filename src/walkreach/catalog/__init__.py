from walkreach.catalog.loader import CandidateStore, load_bundled_facilities, load_facilities

__all__ = ["CandidateStore", "load_bundled_facilities", "load_facilities"]
