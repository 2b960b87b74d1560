"""Survey site: Streamlit front end for the survey platform REST API."""

__version__ = "1.0.0"
