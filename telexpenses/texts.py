"""User-facing reply texts."""

ASK_CATEGORY = "Καινούριο έξοδο ε; \n Επίλεξε κατηγορία:"
ASK_AMOUNT = "πόσα ξόδεψες;"
ASK_COMMENT = "Δώσε μου και ένα σχόλιο"
EXPENSE_SAVED = "Ευχαριστώ! Τα κατέγραψα."
ASK_SPECIFIC_QUERY = "γράψε τον χρόνο, τον μήνα και την κατηγορία (π.χ. 2021 5 Ψιλικά)"

CANCELLED = "Έγινε ακύρωση. Όλα καλά."
NOT_TALKING_TO_YOU = "Εσένα δεν σου μιλάω (ακόμα)"

INVALID_INPUT = "Δεν σε κατάλαβα. Πες μου ξανά."
INVALID_AMOUNT = "Δεν μπορώ να καταλάβω πόσα ξόδεψες. Πες μου ξανά."
INVALID_YEAR = "Δεν μπορώ να καταλάβω τον χρόνο. Πες μου ξανά."
INVALID_MONTH = "Δεν μπορώ να καταλάβω τον μήνα. Πες μου ξανά."
CATEGORY_NOT_FOUND = "Η συγκεκριμένη κατηγορία δεν βρέθηκε, υπολογίζω για όλες."

SAVE_FAILED = "Κάτι πήγε λάθος. Προσπάθησε ξανά με /new."
QUERY_FAILED = "Κάτι πήγε λάθος. Προσπάθησε ξανά."

NOTHING_FOUND = "Δεν βρήκα τίποτα."
TOTAL_LABEL = "Σύνολο"

HELP = (
    "Δεν καταλαβαίνω τι λες. "
    "Μπορείς όμως να κάνεις τα εξής: \n"
    "- `/new` για να δηλώσεις ένα καινούριο έξοδο \n"
    "- `/month` για να δεις τι έχεις ξοδέψει σύνολο αυτόν τον μήνα \n"
    "- `/month_specific` για να δεις τι έχεις ξοδέψει βάσει χρόνου, μήνα και κατηγορίας \n"
)
