"""engine/rules: built-in rules, discovered by AnomalyClassifier."""
