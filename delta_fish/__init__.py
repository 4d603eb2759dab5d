"""Delta trawl survey ETL and CPUE map viewer."""
