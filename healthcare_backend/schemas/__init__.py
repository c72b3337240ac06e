# Largest id the INTEGER primary keys can hold; larger values never name a row
MAX_ID = 2**63 - 1
