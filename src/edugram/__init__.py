"""EduGram API: college-verified student social network backend."""
