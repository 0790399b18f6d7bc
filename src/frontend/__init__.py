"""Flask front end for browsing the top n-grams of a loaded corpus."""
