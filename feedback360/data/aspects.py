# Competency aspects rated in the monthly 360 assessment.
# Assessors rate an aspect once; the rating is stored against each indicator.
ASSESSMENT_ASPECTS = [
    {
        "id": "kolaboratif",
        "name": "Kolaboratif",
        "description": "Kemampuan bekerja sama dan berkolaborasi dengan berbagai pihak",
        "indicators": [
            "Memberi kesempatan kepada berbagai pihak untuk berkontribusi",
            "Terbuka dalam bekerja sama untuk menghasilkan nilai tambah",
            "Menggerakkan pemanfaatan berbagai sumberdaya untuk tujuan bersama",
        ],
    },
    {
        "id": "adaptif",
        "name": "Adaptif",
        "description": "Kemampuan menyesuaikan diri dan berinovasi menghadapi perubahan",
        "indicators": [
            "Cepat menyesuaikan diri menghadapi perubahan",
            "Terus berinovasi dan mengembangkan kreativitas",
            "Bertindak proaktif",
        ],
    },
    {
        "id": "loyal",
        "name": "Loyal",
        "description": "Kesetiaan terhadap ideologi, negara, dan institusi",
        "indicators": [
            "Memegang teguh ideologi Pancasila, Undang-Undang Dasar Negara Republik Indonesia Tahun 1945, "
            "setia kepada Negara Kesatuan Republik Indonesia serta pemerintahan yang sah",
            "Menjaga nama baik sesama ASN, Pimpinan, Instansi, dan Negara",
            "Menjaga rahasia jabatan dan negara",
        ],
    },
    {
        "id": "harmonis",
        "name": "Harmonis",
        "description": "Kemampuan menciptakan lingkungan kerja yang kondusif dan harmonis",
        "indicators": [
            "Menghargai setiap orang apapun latar belakangnya",
            "Suka menolong orang lain",
            "Membangun lingkungan kerja yang kondusif",
        ],
    },
    {
        "id": "kompeten",
        "name": "Kompeten",
        "description": "Kemampuan dan keahlian dalam melaksanakan tugas",
        "indicators": [
            "Meningkatkan kompetensi diri untuk menjawab tantangan yang selalu berubah",
            "Membantu orang lain belajar",
            "Melaksanakan tugas dengan kualitas terbaik",
        ],
    },
    {
        "id": "akuntabel",
        "name": "Akuntabel",
        "description": "Pertanggungjawaban dan integritas dalam menjalankan tugas",
        "indicators": [
            "Melaksanakan tugas dengan jujur, bertanggungjawab, cermat, disiplin dan berintegritas tinggi",
            "Menggunakan kekayaan dan barang milik negara secara bertanggungjawab, efektif, dan efisien",
            "Tidak menyalahgunakan kewenangan jabatan",
        ],
    },
    {
        "id": "berorientasi_pelayanan",
        "name": "Berorientasi Pelayanan",
        "description": "Fokus pada pelayanan yang berkualitas kepada masyarakat",
        "indicators": [
            "Memahami dan memenuhi kebutuhan masyarakat",
            "Ramah, cekatan, solutif, dan dapat diandalkan",
            "Melakukan perbaikan tiada henti",
        ],
    },
]

ASPECT_IDS = {aspect["id"] for aspect in ASSESSMENT_ASPECTS}
